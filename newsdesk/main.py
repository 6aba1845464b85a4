import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import uvicorn

from newsdesk.api.auth_confirm import create_app
from newsdesk.auth.exceptions import AccountDeactivatedError
from newsdesk.auth.session import Session
from newsdesk.config.settings import Settings
from newsdesk.database.connection import close_pool, init_pool
from newsdesk.logging.logger import Log
from newsdesk.newsroom import Newsroom, build_newsroom
from newsdesk.queue.models import Job, JobCategory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="newsdesk",
        description="Transcribe, fact-check and rewrite newsroom material with an LLM",
    )
    parser.add_argument(
        "--user-id",
        help="Signed-in user id; enables the cloud history (needs DB_* settings)",
    )
    parser.add_argument("--email", help="E-mail of the signed-in user")
    sub = parser.add_subparsers(dest="command", required=True)

    transcribe = sub.add_parser("transcribe", help="Transcribe and analyse audio/video files")
    transcribe.add_argument("files", nargs="+", type=Path)

    press = sub.add_parser("press-release", help="Rewrite press releases as wire stories")
    press.add_argument("files", nargs="+", type=Path)
    press.add_argument("--angle", default=None, help="Editorial angle for the rewrite")

    verify = sub.add_parser("verify", help="Fact-check a text snippet")
    verify.add_argument("text")

    history = sub.add_parser("history", help="List or delete history entries")
    history.add_argument("--delete", metavar="ID", default=None)

    serve = sub.add_parser("serve-auth", help="Serve the password-recovery redirect endpoint")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point: parse args -> configure -> run one command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    if args.command == "serve-auth":
        _serve_auth(settings, args.host, args.port)
        return

    if args.user_id:
        init_pool(settings)
    try:
        newsroom = build_newsroom(settings)
        output = asyncio.run(_run(newsroom, args))
        print(json.dumps(output, ensure_ascii=False, indent=2))
    except AccountDeactivatedError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        if args.user_id:
            close_pool()


async def _run(newsroom: Newsroom, args: argparse.Namespace) -> Any:
    if args.user_id:
        await newsroom.sign_in(Session(user_id=args.user_id, email=args.email))
    else:
        await newsroom.load_history()

    if args.command == "transcribe":
        return await _process_files(newsroom, JobCategory.TRANSCRIPTION, args.files)
    if args.command == "press-release":
        return await _process_files(newsroom, JobCategory.PRESS_RELEASE, args.files, args.angle)
    if args.command == "verify":
        fact_check = await asyncio.to_thread(newsroom.gateway.verify_claim, args.text)
        return fact_check.to_payload()
    if args.command == "history":
        if args.delete:
            await newsroom.delete_history(args.delete)
        return [entry.to_cache() for entry in newsroom.history.entries]
    raise ValueError(f"Unknown command: {args.command}")


async def _process_files(
    newsroom: Newsroom,
    category: JobCategory,
    files: list[Path],
    user_angle: str | None = None,
) -> list[dict[str, Any]]:
    jobs = [newsroom.submit_file(path, category, user_angle) for path in files]
    await newsroom.join()
    return [_job_summary(job) for job in jobs]


def _job_summary(job: Job) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "id": job.id,
        "file": job.file_name,
        "status": job.status.value,
        "historyId": job.history_id,
    }
    if job.result is not None:
        summary["result"] = job.result.to_payload()
    if job.error_message:
        summary["error"] = job.error_message
    return summary


def _serve_auth(settings: Settings, host: str, port: int) -> None:
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    main()
