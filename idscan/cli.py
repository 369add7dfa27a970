"""Command-line interface for idscan."""

import base64
import datetime
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
from dotenv import load_dotenv

from idscan.errors import FormatError, IdScanError
from idscan.id_card.emirates import extract_front_info
from idscan.mrz.checksum import verify_check_digits
from idscan.mrz.td1 import decode_td1, mrz_lines_from_text
from idscan.pipeline import DocumentRectifier, RectifierConfig

# Load environment variables from .env
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)

logger = logging.getLogger(__name__)

_IMAGE_EXTENSIONS = ['*.jpg', '*.JPG', '*.jpeg', '*.JPEG', '*.png', '*.PNG', '*.heic', '*.HEIC']


def _set_verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@click.group()
@click.version_option(version='0.1.0')
def main() -> None:
    """idscan - Read ID card MRZs and straighten photographed documents."""
    pass


@main.command()
@click.argument('input_paths', nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    '--output',
    '-o',
    'output_dir',
    type=click.Path(),
    default=None,
    help='Output directory for rectified images (default: cache directory)'
)
@click.option('--debug', is_flag=True, help='Save debug images for each step')
@click.option('--batch', is_flag=True, help='Process all images in directory')
@click.option(
    '--filter',
    'filter_pattern',
    type=str,
    help='Glob pattern to filter files (e.g., "*.jpg")'
)
@click.option('--png', is_flag=True, help='Write PNG instead of JPEG')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def rectify(
    input_paths: tuple,
    output_dir: Optional[str],
    debug: bool,
    batch: bool,
    filter_pattern: Optional[str],
    png: bool,
    verbose: bool
) -> None:
    """Detect the document in each photo and warp it upright.

    INPUT_PATHS: One or more image files or directories to process
    """
    _set_verbose(verbose)

    input_files: List[Path] = []
    for input_path_str in input_paths:
        input_path = Path(input_path_str)

        if input_path.is_file():
            input_files.append(input_path)
        elif input_path.is_dir():
            if not batch:
                logger.error(f"Directory provided but --batch not specified: {input_path}")
                sys.exit(1)
            if filter_pattern:
                input_files.extend(sorted(input_path.glob(filter_pattern)))
            else:
                for ext in _IMAGE_EXTENSIONS:
                    input_files.extend(sorted(input_path.glob(ext)))

    if not input_files:
        logger.error("No input files found")
        sys.exit(1)

    logger.info(f"Processing {len(input_files)} file(s)")

    config = RectifierConfig(output_format='png' if png else 'jpeg')
    rectifier = DocumentRectifier(config)

    debug_root = Path('./debug') if debug else None

    succeeded = 0
    for input_file in input_files:
        try:
            result = rectifier.rectify(
                str(input_file),
                output_dir=output_dir,
                debug_output_dir=str(debug_root / input_file.stem) if debug_root else None,
            )
            succeeded += 1
            click.echo(str(result.output_path))
            logger.info(
                f"  {input_file.name}: {result.output_size[0]}x{result.output_size[1]} "
                f"in {result.processing_time:.3f}s"
            )
        except IdScanError as e:
            logger.error(f"{input_file.name}: {e}")
        except Exception as e:
            logger.error(f"Error processing {input_file}: {e}", exc_info=verbose)

    logger.info(f"COMPLETE: Rectified {succeeded}/{len(input_files)} file(s)")
    if succeeded < len(input_files):
        sys.exit(1)


def _parse_today(value: Optional[str]) -> Optional[datetime.date]:
    if value is None:
        return None
    try:
        return datetime.date.fromisoformat(value)
    except ValueError as e:
        raise click.BadParameter(f"--today must be YYYY-MM-DD: {e}")


@main.command()
@click.argument('lines', nargs=-1)
@click.option(
    '--file',
    'text_file',
    type=click.Path(exists=True, dir_okay=False),
    help='Text file; the last three non-empty lines are decoded'
)
@click.option('--verify', is_flag=True, help='Also verify the check digits')
@click.option('--today', type=str, help='Reference date for century expansion (YYYY-MM-DD)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def mrz(
    lines: tuple,
    text_file: Optional[str],
    verify: bool,
    today: Optional[str],
    verbose: bool
) -> None:
    """Decode a TD1 machine-readable zone and print it as JSON.

    LINES: The three 30-character MRZ lines (quote each one)
    """
    _set_verbose(verbose)
    reference = _parse_today(today)

    try:
        if text_file:
            mrz_lines = mrz_lines_from_text(Path(text_file).read_text(encoding='utf-8'))
        else:
            mrz_lines = list(lines)
        record = decode_td1(mrz_lines, today=reference)
    except FormatError as e:
        logger.error(f"Invalid MRZ: {e}")
        sys.exit(1)

    output = record.to_dict()
    if verify:
        report = verify_check_digits(record, mrz_lines)
        output['check_digits'] = {
            'document_number': report.document_number,
            'birth_date': report.birth_date,
            'expiration_date': report.expiration_date,
            'composite': report.composite,
            'all_valid': report.all_valid,
        }

    click.echo(json.dumps(output, indent=2))


@main.command()
@click.argument('image_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--model', type=str, default=None, help='Claude model used for OCR')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def scan(image_path: str, model: Optional[str], verbose: bool) -> None:
    """OCR an ID card photo and print the fields that could be read.

    IMAGE_PATH: Photo of the front or back of an ID card
    """
    from idscan.ocr.claude_ocr import ClaudeTextRecognizer
    from idscan.preprocessing.loader import load_image

    _set_verbose(verbose)

    image, _ = load_image(image_path)
    try:
        result = ClaudeTextRecognizer(model=model).recognize(image)
    except IdScanError as e:
        logger.error(f"OCR failed: {e}")
        sys.exit(1)

    front = extract_front_info(result)
    output = {'emirates_front': vars(front) if front else None, 'mrz': None}

    try:
        record = decode_td1(mrz_lines_from_text(result.text))
        output['mrz'] = record.to_dict()
    except FormatError as e:
        logger.info(f"No TD1 MRZ in recognized text: {e}")

    click.echo(json.dumps(output, indent=2))


@main.command()
@click.argument('image_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--model', type=str, default=None, help='Claude model used for detection')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def detect(image_path: str, model: Optional[str], verbose: bool) -> None:
    """Detect and label objects in an image, printed as JSON.

    IMAGE_PATH: Image file to analyse
    """
    from idscan.object_detection.detector import ClaudeDetectionBackend, ObjectDetector

    _set_verbose(verbose)

    encoded = base64.b64encode(Path(image_path).read_bytes()).decode('ascii')
    detector = ObjectDetector(ClaudeDetectionBackend(model=model))
    try:
        detections = detector.detect(encoded)
    except IdScanError as e:
        logger.error(f"Detection failed: {e}")
        sys.exit(1)

    click.echo(json.dumps(
        [{'id': d.tracking_id, 'labels': list(d.labels)} for d in detections],
        indent=2,
    ))


if __name__ == '__main__':
    main()
