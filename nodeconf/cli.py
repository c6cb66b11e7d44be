from __future__ import annotations
import argparse
import json
import sys
import uvicorn
from .settings import Settings
from .logging_setup import setup_logging, get_logger
from .errors import ConfigError
from .service import ConfigService
from .config.merger import ConfigMerger
from .config.store import LayeredStore
from .api import create_app

log = get_logger("nodeconf.cli")

def _print_dump(entries) -> None:
    current = None
    for (section, key), value in entries:
        if section != current:
            if current is not None:
                print()
            print(f"[{section}]")
            current = section
        print(f"{key} = {value}")

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="nodeconf")
    parser.add_argument("-c", "--config", action="append", default=None, metavar="FILE",
                        help="INI file to load; repeat for layered overrides (last one is written back)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    dump_p = sub.add_parser("dump", help="Print the merged configuration")
    dump_p.add_argument("--json", action="store_true", help="Print as JSON object")

    get_p = sub.add_parser("get", help="Print one section or one value")
    get_p.add_argument("section")
    get_p.add_argument("key", nargs="?")

    set_p = sub.add_parser("set", help="Set a value (written back to the last file)")
    set_p.add_argument("section")
    set_p.add_argument("key")
    set_p.add_argument("value")
    set_p.add_argument("--no-persist", action="store_true", help="Only change the in-memory value")

    del_p = sub.add_parser("delete", help="Delete a value (written back to the last file)")
    del_p.add_argument("section")
    del_p.add_argument("key")
    del_p.add_argument("--no-persist", action="store_true", help="Only change the in-memory value")

    diff_p = sub.add_parser("diff", help="Compare the configured files against another file stack")
    diff_p.add_argument("other", nargs="+", metavar="FILE")

    api_p = sub.add_parser("api", help="Run REST API (FastAPI)")
    api_p.add_argument("--host", default=None)
    api_p.add_argument("--port", type=int, default=None)

    args = parser.parse_args(argv)
    settings = Settings()
    setup_logging(settings)

    files = args.config if args.config else settings.ini_paths()
    if not files:
        log.warning("No INI files configured (use -c or NODECONF_INI_FILES); starting empty.")

    service = ConfigService(files)
    try:
        service.start()
    except ConfigError as e:
        log.error("Startup failed: %s", e)
        return 1

    try:
        if args.cmd == "dump":
            entries = service.all()
            if args.json:
                out = {}
                for (section, key), value in entries:
                    out.setdefault(section, {})[key] = value
                print(json.dumps(out, indent=2, ensure_ascii=False))
            else:
                _print_dump(entries)
            return 0

        if args.cmd == "get":
            if args.key is None:
                for key, value in sorted(service.get(args.section)):
                    print(f"{key} = {value}")
                return 0
            value = service.get(args.section, args.key)
            if value is None:
                log.error("Not found: [%s] %s", args.section, args.key)
                return 1
            print(value)
            return 0

        if args.cmd == "set":
            service.set(args.section, args.key, args.value, persist=not args.no_persist)
            return 0

        if args.cmd == "delete":
            service.delete(args.section, args.key, persist=not args.no_persist)
            return 0

        if args.cmd == "diff":
            other = LayeredStore.load(args.other)
            delta = ConfigMerger().compute_delta(service.all(), other.all())
            print(json.dumps(delta, indent=2, ensure_ascii=False))
            return 0 if not any(delta.values()) else 1

        if args.cmd == "api":
            app = create_app(service)
            uvicorn.run(
                app,
                host=args.host or settings.api_host,
                port=args.port or settings.api_port,
                log_level=settings.log_level.lower(),
            )
            return 0
    except ConfigError as e:
        log.error("%s", e)
        return 1
    finally:
        service.stop()

    return 2

def run() -> None:
    sys.exit(main())
