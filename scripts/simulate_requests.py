#!/usr/bin/env python
"""Send catalog requests to a running service for local testing.

Usage:
    # Suggest a category
    python scripts/simulate_requests.py --owner seller-1 --name "Tinta acrilica 18L"

    # Suggest from an uploaded filename, then finalize with a new SKU
    python scripts/simulate_requests.py --owner seller-1 \
        --filename fotos/TIN_0042.jpg --finalize

    # Finalize with an explicit category and learn from the name
    python scripts/simulate_requests.py --owner seller-1 \
        --name "Rejunte flexivel cinza" --category insumos --finalize --learn
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import httpx


async def post(client: httpx.AsyncClient, path: str, payload: dict, owner_id: str | None) -> dict:
    """POST a JSON payload and print the response."""
    headers = {"X-Owner-Id": owner_id} if owner_id else {}
    response = await client.post(path, json=payload, headers=headers)

    print(f"\nPOST {path} -> {response.status_code}")
    try:
        body = response.json()
    except ValueError:
        body = {"error": response.text, "status_code": response.status_code}
    print(json.dumps(body, indent=2, ensure_ascii=False))
    return body


async def check_health(base_url: str) -> bool:
    """Check if the service is running and healthy."""
    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(f"{base_url}/health")
            return response.status_code == 200
    except httpx.HTTPError as e:
        print(f"Health check failed: {e}")
        return False


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Send catalog requests to a local service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--url", default="http://localhost:8080", help="Service base URL")
    parser.add_argument("--owner", default=None, help="Owner ID (X-Owner-Id header)")
    parser.add_argument("--name", default=None, help="Product name")
    parser.add_argument("--filename", default=None, help="Uploaded image filename")
    parser.add_argument("--sku", default=None, help="Existing product code")
    parser.add_argument("--category", default=None, help="Explicit category slug (finalize)")
    parser.add_argument("--mode", choices=["owner", "global"], default="owner", help="SKU counter scope")
    parser.add_argument("--finalize", action="store_true", help="Also finalize category and SKU")
    parser.add_argument("--learn", action="store_true", help="Learn terms when finalizing")
    parser.add_argument("--skip-health", action="store_true", help="Skip health check")
    parser.add_argument("--output", type=Path, default=None, help="Save responses JSON to file")

    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    if not (args.name or args.filename or args.sku):
        print("Error: give at least one of --name, --filename, --sku")
        return 1

    if not args.skip_health:
        print(f"Checking service health at {args.url}...")
        if not await check_health(args.url):
            print("Error: service is not healthy or not running")
            print("Make sure the server is running: uvicorn orcasmart.main:app --port 8080")
            return 1

    results: dict[str, dict] = {}
    async with httpx.AsyncClient(base_url=args.url, timeout=30.0) as client:
        results["suggest"] = await post(
            client,
            "/catalog/suggest",
            {"name": args.name, "filename": args.filename, "sku": args.sku},
            args.owner,
        )

        if args.finalize:
            name = args.name or args.filename
            results["finalize"] = await post(
                client,
                "/catalog/finalize",
                {
                    "name": name,
                    "sku": args.sku,
                    "category": args.category,
                    "mode": args.mode,
                    "learn": args.learn,
                },
                args.owner,
            )

    if args.output:
        args.output.write_text(json.dumps(results, indent=2, ensure_ascii=False))
        print(f"\nResponses saved to: {args.output}")

    failed = any("error" in body for body in results.values())
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
