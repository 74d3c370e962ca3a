import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict

import requests


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Request a QR instruction PDF from a running server."
    )
    parser.add_argument("url", help="URL to encode in the QR code.")
    parser.add_argument(
        "--secret",
        default=os.getenv("AUTH_SECRET", ""),
        help="Shared secret (default: $AUTH_SECRET).",
    )
    parser.add_argument(
        "--host",
        default="http://127.0.0.1:3002",
        help="Server host (default: http://127.0.0.1:3002).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("qr-instructions.pdf"),
        help="Path to save the PDF (default: qr-instructions.pdf).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload instead of sending the request.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    payload: Dict[str, Any] = {
        "url": args.url,
        "authSecret": args.secret,
    }

    if args.dry_run:
        redacted = dict(payload, authSecret="***" if args.secret else "")
        print(json.dumps(redacted, indent=2))
        return 0

    response = requests.post(
        f"{args.host.rstrip('/')}/generate-qr-pdf",
        json=payload,
        timeout=30,
    )

    print(f"Status: {response.status_code}")
    if response.headers.get("Content-Type", "").startswith("application/pdf"):
        args.output.write_bytes(response.content)
        print(f"Saved PDF to {args.output.resolve()}")
        return 0

    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)
    return 1


if __name__ == "__main__":
    sys.exit(main())
