import argparse
import json
import logging

from .core.config import settings
from .services.furuno_converter import decode_furuno_glob
from .services.metadata import summarize_radar_file


class FurunoArgumentParser(argparse.ArgumentParser):

    def __init__(self) -> None:

        super().__init__(
            prog="furuno-decode",
            description="Decode Furuno .rhix radar files",
        )

        # Patrón de archivos: para una carpeta usar * al final
        self.add_argument(
            "-f",
            "--files",
            dest="files",
            help="Path(s) of file to decode. For a folder, use a * at the end",
            required=True,
        )
        self.add_argument(
            "-n",
            "--name",
            dest="name",
            default=settings.RADAR_NAME,
            help="Radar name for the decoded model",
        )
        self.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable debug logging",
        )

        return None


def decode_files(argv: list[str] | None = None) -> int:

    args = FurunoArgumentParser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    results = decode_furuno_glob(args.files, name=args.name)
    for path, radar_file in results:
        summary = {"file": str(path), **summarize_radar_file(radar_file)}
        print(json.dumps(summary))

    # Código de salida distinto de cero si ningún archivo pudo decodificarse
    return 0 if results else 1


def main() -> None:
    raise SystemExit(decode_files())
