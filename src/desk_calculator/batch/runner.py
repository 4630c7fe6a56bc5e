"""Evaluate every expression of a text file or archive."""
from pathlib import Path
import tarfile
import tempfile
from typing import List
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field

from desk_calculator.common.evaluator import ExpressionEvaluator
from desk_calculator.common.logger import logger
from desk_calculator.common.models import CalculatorSettings, EvaluationResult


class BatchRunner(BaseModel):
    """
    Evaluate expressions read from a file, one per line, and write the results to another file.

    The batch runner:
    - reads expressions from a plain text file or from the first .txt member of an archive
    - skips blank lines
    - evaluates each expression independently; a malformed line never stops the run
    - writes ``expr = result`` or ``expr -> ERROR: kind`` lines, in input order
    """

    # Read-only, the same runner can be reused for several files
    model_config = ConfigDict(frozen=True)

    settings: CalculatorSettings = Field(default_factory=CalculatorSettings, description="Result formatting settings")

    @staticmethod
    def build_output_path(input_path: Path) -> Path:
        """
        Construct the default output path for an input file.

        - Keeps the input folder
        - Replaces dots in extensions with underscores
        - Appends ``_results.txt``

        Examples
        --------
        input: resources/operations.7z
        output: resources/operations_7z_results.txt

        :param Path input_path: Path to the input file

        :return: Path to the output file
        :rtype: Path
        """
        suffixes = "".join(input_path.suffixes)
        stem = input_path.name[: len(input_path.name) - len(suffixes)]
        suffix_safe = suffixes.replace(".", "_")
        return input_path.with_name(f"{stem}{suffix_safe}_results.txt")

    def read_expressions(self, input_file: Path) -> List[str]:
        """
        Load the non-blank lines of a text file or archive.

        :param Path input_file: Path to a .txt file or a supported archive

        :return: Stripped, non-empty lines
        :rtype: List[str]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        if input_file.suffix == ".txt":
            content = input_file.read_text(encoding="utf-8")
        else:
            content = self._extract_archive(input_file)
        return [line.strip() for line in content.splitlines() if line.strip()]

    def format_line(self, result: EvaluationResult) -> str:
        """
        Render one output line.

        :param EvaluationResult result: Evaluation outcome

        :return: Output line without trailing newline
        :rtype: str
        """
        if result.ok:
            shown = ExpressionEvaluator.format_result(result.value, self.settings.decimal_places)
            return f"{result.expression}{self.settings.record_separator}{shown}"
        return f"{result.expression} -> ERROR: {result.error.value}"

    def run(self, input_file: Path, output_file: Path) -> List[EvaluationResult]:
        """
        Evaluate every expression of ``input_file`` and write the results to ``output_file``.

        Each line is flushed as soon as it is computed so that progress is kept if the run is interrupted.

        :param Path input_file: Path to the input file or archive
        :param Path output_file: Path where results will be written

        :return: Evaluation outcomes in input order
        :rtype: List[EvaluationResult]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        expressions: List[str] = self.read_expressions(input_file)
        logger.info(f"📄🏁 Evaluating {len(expressions)} expressions from {input_file}")

        results: List[EvaluationResult] = []
        with output_file.open("w", encoding="utf-8") as f_out:
            for line_number, expr in enumerate(expressions, start=1):
                result = ExpressionEvaluator.evaluate(expr)
                if not result.ok:
                    logger.error(f"📄❌ Line {line_number}: could not evaluate {expr!r} ({result.error.value})")
                f_out.write(self.format_line(result) + "\n")
                f_out.flush()
                results.append(result)

        failed = sum(1 for result in results if not result.ok)
        logger.info(f"📄✅ Wrote {len(results)} results to {output_file} ({failed} failed)")
        return results

    def _extract_archive(self, archive_path: Path) -> str:
        """
        Return the content of the first .txt member of a supported archive.

        Supported formats: .zip, .tar.xz, .7z

        :param Path archive_path: Path to the archive file

        :return: Text of the first .txt member
        :rtype: str
        :raises ValueError: If no .txt member is found or the format is unsupported
        """
        if archive_path.suffix == ".zip":
            return self._read_zip(archive_path)
        if archive_path.suffixes[-2:] == [".tar", ".xz"]:
            return self._read_tar_xz(archive_path)
        if archive_path.suffix == ".7z":
            return self._read_7z(archive_path)
        raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")

    @staticmethod
    def _first_text_member(names: List[str], archive_kind: str) -> str:
        for name in names:
            if name.endswith(".txt"):
                return name
        raise ValueError(f"📄❌ No .txt file found in {archive_kind} archive")

    def _read_zip(self, archive_path: Path) -> str:
        with zipfile.ZipFile(archive_path, "r") as zf:
            member = self._first_text_member(zf.namelist(), "zip")
            return zf.read(member).decode("utf-8")

    def _read_tar_xz(self, archive_path: Path) -> str:
        with tarfile.open(archive_path, "r:xz") as tf:
            files = {m.name: m for m in tf.getmembers() if m.isfile()}
            member = self._first_text_member(list(files), "tar.xz")
            with tf.extractfile(files[member]) as f_in:
                return f_in.read().decode("utf-8")

    def _read_7z(self, archive_path: Path) -> str:
        # py7zr only extracts to disk, keep the member away from the archive folder
        with py7zr.SevenZipFile(archive_path, mode="r") as archive, tempfile.TemporaryDirectory() as tmpdir:
            member = self._first_text_member(archive.getnames(), "7z")
            archive.extract(path=tmpdir, targets=[member])
            return (Path(tmpdir) / member).read_text(encoding="utf-8")
