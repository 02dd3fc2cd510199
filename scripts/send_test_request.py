import argparse
import base64
import json
from pathlib import Path
from typing import Any, Dict, List

import requests

DATA_URL_PREFIX = "data:image/png;base64,"


def parse_field(raw: str) -> List[str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    return [key, value]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send a test payload to the QR code generation API."
    )
    parser.add_argument(
        "type",
        choices=["url", "text", "wifi", "phone", "sms", "email"],
        help="QR payload type.",
    )
    parser.add_argument(
        "--field",
        dest="fields",
        action="append",
        type=parse_field,
        default=[],
        metavar="KEY=VALUE",
        help="Payload field, repeatable (e.g. --field ssid=Home).",
    )
    parser.add_argument(
        "--host",
        default="http://127.0.0.1:3000",
        help="Server host (default: http://127.0.0.1:3000).",
    )
    parser.add_argument(
        "--qr-output",
        type=Path,
        default=Path("qr_code.png"),
        help="Path to save the QR code image (default: qr_code.png).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload instead of sending the request.",
    )
    return parser.parse_args(argv)


def build_payload(qr_type: str, fields: List[List[str]]) -> Dict[str, Any]:
    return {"type": qr_type, "data": dict(fields)}


def save_qr_code(data_url: str, output_path: Path) -> None:
    if not data_url.startswith(DATA_URL_PREFIX):
        raise ValueError("qrCode is not a base64 PNG data URL")
    data = base64.b64decode(data_url[len(DATA_URL_PREFIX):])
    output_path.write_bytes(data)


def main(argv=None) -> None:
    args = parse_args(argv)
    payload = build_payload(args.type, args.fields)

    if args.dry_run:
        print(json.dumps(payload, indent=2))
        return

    response = requests.post(
        f"{args.host.rstrip('/')}/api/generate",
        json=payload,
        timeout=10,
    )

    print(f"Status: {response.status_code}")
    if not response.ok:
        print(response.text)
    response.raise_for_status()
    data = response.json()

    qr_code = data.pop("qrCode", None)
    print(json.dumps(data, indent=2))

    if qr_code:
        save_qr_code(qr_code, args.qr_output)
        print(f"Saved QR code to {args.qr_output.resolve()}")
    else:
        print("No QR code returned in response.")


if __name__ == "__main__":
    main()
