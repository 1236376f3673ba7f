import argparse
import logging

import config


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(),
                  logging.FileHandler(config.LOG_FILE, encoding="utf-8")],
    )


def main(argv=None):
    ap = argparse.ArgumentParser(description="Browse a profile's reels")
    ap.add_argument("username", nargs="?", help="search this handle on start-up")
    ap.add_argument("--limit", type=int, default=config.DEFAULT_LIMIT,
                    help=f"reels to fetch ({config.MIN_LIMIT}-{config.MAX_LIMIT})")
    ap.add_argument("--fullscreen", action="store_true")
    ap.add_argument("--port", type=int, default=config.WEB_PORT,
                    help="web remote port")
    ap.add_argument("--no-remote", action="store_true",
                    help="do not start the web remote")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    _setup_logging(args.verbose)
    config.FULLSCREEN = args.fullscreen

    from app import ReelsExplorer
    import web_remote

    app = ReelsExplorer()
    if not args.no_remote:
        web_remote.start(app, args.port)
    if args.username:
        app.search(args.username, args.limit)
    app.run()


if __name__ == "__main__":
    main()
