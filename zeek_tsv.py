# zeek_tsv.py
import argparse
import json
import logging
import os
import sys
import traceback

import yaml

from zeektsv.coercion import TYPES
from zeektsv.loaders import load_zeek_tsv
from zeektsv.logger_config import setup_logger
from zeektsv.records import LogDocument, Record
from zeektsv.stream import stream_zeek_tsv
from zeektsv.utils import metadata_to_json, record_to_json, write_json_lines
from zeektsv.writer import dump

logger = logging.getLogger("zeektsv")

FORMATS = ("jsonl", "json", "tsv")
TIMESTAMPS = ("iso", "epoch")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# ----------------------------------------------------------------------
# Defaults (also the starter file written by --init-config)
# ----------------------------------------------------------------------
STARTER_CONFIG = {
    "output": {
        "format": "jsonl",
        "timestamps": "iso",
    },
    "stream": False,
    "log_level": "INFO",
}


def load_config(config_path):
    """
    Load CLI defaults from a YAML file.

    Expected structure:
      output:
        format: jsonl      # jsonl | json | tsv
        timestamps: iso    # iso | epoch
      stream: false
      log_level: INFO

    Missing file or invalid entries fall back to the defaults above.
    """
    config = {
        "format": STARTER_CONFIG["output"]["format"],
        "timestamps": STARTER_CONFIG["output"]["timestamps"],
        "stream": STARTER_CONFIG["stream"],
        "log_level": STARTER_CONFIG["log_level"],
    }
    if not os.path.exists(config_path):
        return config

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        return config

    output = data.get("output", {}) or {}
    if isinstance(output, dict):
        fmt = str(output.get("format", "")).lower()
        if fmt in FORMATS:
            config["format"] = fmt
        ts = str(output.get("timestamps", "")).lower()
        if ts in TIMESTAMPS:
            config["timestamps"] = ts

    if isinstance(data.get("stream"), bool):
        config["stream"] = data["stream"]

    level = str(data.get("log_level", "")).upper()
    if level in LOG_LEVELS:
        config["log_level"] = level

    return config


def write_config_template(path):
    """
    Write a starter config YAML file to 'path'.

    Does not overwrite an existing file.
    """
    if os.path.exists(path):
        print(f"[!] Refusing to overwrite existing config: {path}")
        print("    Move or delete the existing file, or specify a different --config path.")
        return False

    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(STARTER_CONFIG, f, sort_keys=False)

    print(f"[+] Wrote starter configuration to: {path}")
    return True


def convert_file(path, out, fmt="jsonl", timestamps="iso", stream=False):
    """
    Parse one Zeek log and write it to 'out' in the requested format.
    Returns the number of records written.
    """
    if stream:
        items = stream_zeek_tsv(path)
    else:
        document = load_zeek_tsv(path)
        items = list(document.records) + [document.metadata]

    if fmt == "jsonl":
        records = (record_to_json(item, timestamps) for item in items if isinstance(item, Record))
        return write_json_lines(records, out)

    records = []
    metadata = None
    for item in items:
        if isinstance(item, Record):
            records.append(item)
        else:
            metadata = item

    if fmt == "json":
        doc = {
            "metadata": metadata_to_json(metadata),
            "records": [record_to_json(r, timestamps) for r in records],
        }
        out.write(json.dumps(doc) + "\n")
    else:
        dump(LogDocument(metadata, records), out)
    return len(records)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="zeek-tsv",
        description="Decode Zeek TSV logs to JSON (or re-encode them as canonical TSV).",
    )
    parser.add_argument("logs", nargs="*", help="Any number of Zeek logs to parse")
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Print verbose error tracebacks and debug logging",
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        default=None,
        help="Parse line by line instead of reading each file whole",
    )
    parser.add_argument("--format", choices=FORMATS, help="Output format (default from config: jsonl)")
    parser.add_argument("--timestamps", choices=TIMESTAMPS, help="How to render date fields in JSON")
    parser.add_argument("--output", help="Optional output file (default: stdout)")
    parser.add_argument(
        "--config",
        default="zeek-tsv.yml",
        help="Path to YAML file with CLI defaults (default: zeek-tsv.yml).",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a starter config YAML file to --config and exit.",
    )
    parser.add_argument(
        "--list-types",
        action="store_true",
        help="List the Zeek types that are decoded, then exit",
    )

    args = parser.parse_args(argv)
    config = load_config(args.config)

    level = logging.DEBUG if args.debug else getattr(logging, config["log_level"])
    setup_logger("zeektsv", level=level)

    # --------------------------------------------------------------
    # Handle --init-config
    # --------------------------------------------------------------
    if args.init_config:
        write_config_template(args.config)
        return

    # --------------------------------------------------------------
    # Handle --list-types
    # --------------------------------------------------------------
    if args.list_types:
        print("Decoded types:\n")
        for name in sorted(TYPES.keys()):
            meta = TYPES[name]
            print(f"  {name:10} {meta['python'].__name__:10} {meta['desc']}")
        print("\nAny other type is kept as text.")
        return

    if not args.logs:
        parser.print_help()
        return

    fmt = args.format or config["format"]
    timestamps = args.timestamps or config["timestamps"]
    stream = config["stream"] if args.stream is None else args.stream

    out = open(args.output, "w", encoding="utf-8", newline="") if args.output else sys.stdout
    failed = 0
    try:
        for path in args.logs:
            try:
                n = convert_file(path, out, fmt=fmt, timestamps=timestamps, stream=stream)
                logger.debug(f"{path}: {n} records")
            except (ValueError, OSError) as e:
                failed += 1
                print(f"[!] {path}: {e}", file=sys.stderr)
                if args.debug:
                    traceback.print_exc()
    finally:
        if out is not sys.stdout:
            out.close()

    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
