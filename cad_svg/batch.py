"""
Batch conversion of DXF files to SVG.

Provides:
- Folder-based batch conversion (DXF → SVG)
- Progress tracking and reporting
- Parallel processing (one document per worker thread)
- Per-file error isolation: a broken file never stops the batch

Usage:
    from cad_svg.batch import batch_convert

    results = batch_convert(
        input_dir="./plans",
        output_dir="./svg",
        pattern="*.dxf",
        parallel=True,
    )
    print(results.summary())
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from cad_svg.conversion.document import convert_file
from cad_svg.project_config import ProjectConfig, load_config

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Result of a single file conversion."""
    input_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    error: Optional[str] = None
    duration_seconds: float = 0.0
    total_entities: int = 0
    converted_entities: int = 0
    failed_entities: int = 0

    @property
    def status(self) -> str:
        return "OK" if self.success else "FAILED"


@dataclass
class BatchResult:
    """Result of batch conversion."""
    results: List[ConversionResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total == 0:
            return 0.0
        return 100.0 * self.successful / self.total

    @property
    def failed_entities(self) -> int:
        """Entities (mostly dimensions) that could not be converted."""
        return sum(r.failed_entities for r in self.results)

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Batch Conversion Summary",
            "=" * 40,
            f"Total files:     {self.total}",
            f"Successful:      {self.successful}",
            f"Failed:          {self.failed}",
            f"Success rate:    {self.success_rate:.1f}%",
            f"Failed entities: {self.failed_entities}",
            f"Total time:      {self.total_duration_seconds:.1f}s",
            "",
        ]

        if self.failed > 0:
            lines.append("Failed files:")
            for r in self.results:
                if not r.success:
                    lines.append(f"  - {r.input_path.name}: {r.error}")

        return "\n".join(lines)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': self.success_rate,
            'total_duration_seconds': self.total_duration_seconds,
            'results': [
                {
                    'input': str(r.input_path),
                    'output': str(r.output_path) if r.output_path else None,
                    'success': r.success,
                    'error': r.error,
                    'duration': r.duration_seconds,
                    'entities': r.total_entities,
                    'converted': r.converted_entities,
                    'failed_entities': r.failed_entities,
                }
                for r in self.results
            ],
        }


def find_dxf_files(
    input_dir: Union[str, Path],
    pattern: str = "*.dxf",
    recursive: bool = False,
) -> List[Path]:
    """Find DXF files in directory (both .dxf and .DXF).

    Raises:
        FileNotFoundError: Directory does not exist
        NotADirectoryError: Path is not a directory
    """
    input_dir = Path(input_dir)

    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    if not input_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {input_dir}")

    search = input_dir.rglob if recursive else input_dir.glob
    files = list(search(pattern))
    files.extend(search(pattern.replace('.dxf', '.DXF')))

    files = sorted(set(files))

    logger.info("Found %d DXF files in %s", len(files), input_dir)
    return files


def convert_single_file(
    input_path: Path,
    output_dir: Path,
    config: Optional[ProjectConfig] = None,
    output_prefix: str = "",
    output_suffix: str = "",
    use_recover: bool = False,
) -> ConversionResult:
    """Convert a single DXF file to SVG.

    Errors are captured in the result instead of being raised.
    """
    start_time = time.perf_counter()

    output_path = output_dir / f"{output_prefix}{input_path.stem}{output_suffix}.svg"
    result = ConversionResult(input_path=input_path)

    try:
        saved_path, ctx = convert_file(
            input_path, output_path, config=config, use_recover=use_recover,
        )
        result.success = True
        result.output_path = saved_path
        result.total_entities = ctx.info.total_entities
        result.converted_entities = ctx.info.successful_entity_conversions
        result.failed_entities = ctx.info.failed_entity_conversions

    except Exception as e:
        result.success = False
        result.error = str(e)
        logger.error("Failed to convert %s: %s", input_path.name, e)

    result.duration_seconds = time.perf_counter() - start_time
    return result


def _log_progress(i: int, total: int, result: ConversionResult) -> None:
    logger.info(
        "[%d/%d] %s: %s (%.1fs)",
        i, total, result.input_path.name, result.status, result.duration_seconds,
    )


def batch_convert(
    input_dir: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    pattern: str = "*.dxf",
    recursive: bool = False,
    config: Optional[ProjectConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    output_prefix: str = "",
    output_suffix: str = "",
    use_recover: bool = False,
    progress_callback: Optional[Callable[[int, int, ConversionResult], None]] = None,
) -> BatchResult:
    """Batch convert DXF files to SVG.

    Args:
        input_dir: Directory containing DXF files
        output_dir: Output directory (default: same as input)
        pattern: Glob pattern for DXF files
        recursive: Search subdirectories
        config: Project configuration
        config_path: Path to .cadsvg.json config file
        parallel: Convert files in worker threads
        max_workers: Maximum parallel workers (None = executor default)
        output_prefix: Prefix for output filenames
        output_suffix: Suffix for output filenames
        use_recover: Read files with ezdxf.recover
        progress_callback: Called after each file: (current, total, result)

    Returns:
        BatchResult with conversion statistics
    """
    start_time = time.perf_counter()

    input_dir = Path(input_dir)
    output_dir = Path(output_dir) if output_dir else input_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    if config is None and config_path:
        config = load_config(explicit_config=config_path)
    elif config is None:
        config = load_config(dxf_path=input_dir / "dummy.dxf")

    dxf_files = find_dxf_files(input_dir, pattern, recursive)

    if not dxf_files:
        logger.warning("No DXF files found in %s", input_dir)
        return BatchResult(total_duration_seconds=time.perf_counter() - start_time)

    logger.info(
        "Starting batch conversion: %d files, parallel=%s",
        len(dxf_files), parallel
    )

    results: List[ConversionResult] = []

    def convert(path: Path) -> ConversionResult:
        return convert_single_file(
            input_path=path,
            output_dir=output_dir,
            config=config,
            output_prefix=output_prefix,
            output_suffix=output_suffix,
            use_recover=use_recover,
        )

    if parallel:
        # Every document gets its own ConversionContext; config is read-only
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(convert, f): f for f in dxf_files}

            for i, future in enumerate(as_completed(futures), 1):
                result = future.result()
                results.append(result)
                if progress_callback:
                    progress_callback(i, len(dxf_files), result)
                _log_progress(i, len(dxf_files), result)

        results.sort(key=lambda r: r.input_path)
    else:
        for i, dxf_file in enumerate(dxf_files, 1):
            result = convert(dxf_file)
            results.append(result)
            if progress_callback:
                progress_callback(i, len(dxf_files), result)
            _log_progress(i, len(dxf_files), result)

    batch_result = BatchResult(
        results=results,
        total_duration_seconds=time.perf_counter() - start_time,
    )

    logger.info(
        "Batch conversion complete: %d/%d successful (%.1f%%) in %.1fs",
        batch_result.successful, batch_result.total,
        batch_result.success_rate, batch_result.total_duration_seconds
    )

    return batch_result


def batch_convert_cli(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for batch conversion."""
    import argparse

    from cad_svg.logging_config import configure_default_logging

    parser = argparse.ArgumentParser(
        description="Batch convert DXF files to SVG"
    )
    parser.add_argument("input_dir", help="Directory containing DXF files")
    parser.add_argument(
        "-o", "--output",
        dest="output_dir",
        help="Output directory (default: same as input)"
    )
    parser.add_argument(
        "-p", "--pattern",
        default="*.dxf",
        help="File pattern (default: *.dxf)"
    )
    parser.add_argument("-r", "--recursive", action="store_true", help="Search subdirectories")
    parser.add_argument(
        "-c", "--config",
        dest="config_path",
        help="Path to .cadsvg.json config file"
    )
    parser.add_argument("--parallel", action="store_true", help="Use parallel processing")
    parser.add_argument("-j", "--jobs", type=int, dest="max_workers", help="Maximum parallel jobs")
    parser.add_argument("--prefix", default="", help="Output filename prefix")
    parser.add_argument("--suffix", default="", help="Output filename suffix")
    parser.add_argument("--recover", action="store_true", help="Read damaged DXF files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    configure_default_logging(verbose=args.verbose)

    try:
        result = batch_convert(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            pattern=args.pattern,
            recursive=args.recursive,
            config_path=args.config_path,
            parallel=args.parallel,
            max_workers=args.max_workers,
            output_prefix=args.prefix,
            output_suffix=args.suffix,
            use_recover=args.recover,
        )

        print("\n" + result.summary())

        return 0 if result.failed == 0 else 1

    except (FileNotFoundError, NotADirectoryError) as e:
        logger.error("Batch conversion failed: %s", e)
        return 1
