"""Print a service account key file as base64 for GOOGLE_SERVICE_ACCOUNT_JSON_BASE64."""

import argparse
import base64
import json
import sys
from pathlib import Path


def encode_key_file(path: Path) -> str:
    """Return the base64 of a service account JSON file

    Raises:
        ValueError: if the file is not a service account key

    """
    text = path.read_text(encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict) or not data.get("client_email") or not data.get("private_key"):
        raise ValueError(f"{path} is not a service account key file")
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("key_file", type=Path, help="Path to the service account .json file")
    args = parser.parse_args(argv)

    try:
        encoded = encode_key_file(args.key_file)
    except (OSError, ValueError) as e:
        print(f"Could not encode {args.key_file}: {e}", file=sys.stderr)
        return 1

    print(encoded)
    return 0


if __name__ == "__main__":
    sys.exit(main())
