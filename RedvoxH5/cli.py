import argparse
import sys

from .convert import convert
from .schema import PACKET_EXTENSION

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_IO = 2
EXIT_INTERRUPTED = 130


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def main(argv=None):
    parser = _ArgumentParser(
        prog="RedvoxH5",
        description="Convert a directory of JSON Redvox packets to a single HDF5 file",
    )
    parser.add_argument("input_directory", help="Directory searched recursively for packet files")
    parser.add_argument(
        "outfile", help="Output HDF5 file path (.h5 is appended if missing; an existing file is replaced)"
    )
    parser.add_argument(
        "--extension",
        "-e",
        default=PACKET_EXTENSION,
        help=f"Packet file extension (default: {PACKET_EXTENSION})",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Only report errors")

    args = parser.parse_args(argv)
    try:
        convert(
            input_directory=args.input_directory,
            outfile=args.outfile,
            extension=args.extension,
            verbose=not args.quiet,
        )
        return EXIT_OK
    except KeyboardInterrupt:
        print("Interrupted.")
        return EXIT_INTERRUPTED
    except ValueError as e:
        # Invalid input directory or nothing to convert
        print(str(e), file=sys.stderr)
        return EXIT_USAGE
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_IO
