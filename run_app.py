import argparse
import logging

from miring.settings import load_settings
from web import app


def main():
    parser = argparse.ArgumentParser(
        description="Run the MIRING validator web service",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Run in development mode with auto-reload (Flask reloader)",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5000,
        help="Port to listen on",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, load_settings()["log_level"], logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.reload:
        print(f"Starting in development mode with reloader on http://{args.host}:{args.port} (debug=True)")
        # debug=True enables the reloader; development only
        app.run(host=args.host, port=args.port, debug=True)
        return

    from waitress import serve

    print(f"Starting with waitress on http://{args.host}:{args.port}")
    serve(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
