from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

import httpx

from clara.config_api import ConfigStoreClient, parse_config, parse_config_list


async def run(url: str, cmd: str, args: argparse.Namespace, store: Optional[ConfigStoreClient] = None) -> int:
    async with store or ConfigStoreClient() as store:
        if cmd == "get":
            resp = await store.fetch(url)
            print(parse_config(resp.text).formatted)
        elif cmd == "list":
            resp = await store.fetch(url)
            for cfg in parse_config_list(resp.text):
                print(f"{cfg.id}  {cfg.name}")
        elif cmd in ("create", "replace"):
            with open(args.file, "r", encoding="utf-8") as f:
                body = f.read()
            if cmd == "create":
                resp = await store.create(url, body)
            else:
                resp = await store.replace(url, body)
            print(f"[store] {cmd} -> {resp.status_code}")
        elif cmd == "delete":
            resp = await store.delete(url)
            print(f"[store] delete -> {resp.status_code}")
    return 0


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Fetch and save C.L.A.R.A lighting configs")
    ap.add_argument("--url", default="http://127.0.0.1/api/lighting/", help="Config (or config collection) URI")
    sub = ap.add_subparsers(dest="cmd", required=True)
    sub.add_parser("get")
    sub.add_parser("list")
    p_create = sub.add_parser("create"); p_create.add_argument("--file", required=True)
    p_replace = sub.add_parser("replace"); p_replace.add_argument("--file", required=True)
    sub.add_parser("delete")
    args = ap.parse_args(argv)
    try:
        return asyncio.run(run(args.url, args.cmd, args))
    except (httpx.HTTPError, OSError, ValueError) as e:
        print(f"[store] error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
