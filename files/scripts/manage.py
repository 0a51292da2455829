"""
Maintenance commands for the voice detection service.

Run from the files/ directory:

  python -m scripts.manage score path/to/audio.mp3 --language English
  python -m scripts.manage create-key "Jane Doe"
  python -m scripts.manage stats

create-key and stats use DATABASE_URL from the environment (or .env).
"""
import argparse
import json
import sys
from typing import get_args

from voice_api.config import settings
from voice_api.database import Base, make_engine, make_session_factory
from voice_api.model.model import analyze
from voice_api.repositories import ApiKeyRepository, RequestLogRepository
from voice_api.schemas import ApiKeyOut, Language, RequestLogOut


def score(path, language):
    with open(path, "rb") as f:
        data = f.read()
    verdict = analyze(data)
    return {
        "status": "success",
        "language": language,
        "classification": verdict.classification,
        "confidenceScore": verdict.confidence_score,
        "explanation": verdict.explanation,
        "pAI": verdict.p_ai,
        "pHuman": verdict.p_human,
        "encoderTag": verdict.features.has_encoder_tag,
        "id3": verdict.features.has_id3,
        "sizeBytes": verdict.features.size,
    }


def _open_session(database_url):
    engine = make_engine(database_url)
    Base.metadata.create_all(bind=engine)
    return make_session_factory(engine)()


def create_key(owner, database_url):
    db = _open_session(database_url)
    try:
        api_key = ApiKeyRepository(db, key_prefix=settings.API_KEY_PREFIX).create(owner)
        return ApiKeyOut.model_validate(api_key).model_dump(mode="json", by_alias=True)
    finally:
        db.close()


def stats(database_url, limit):
    db = _open_session(database_url)
    try:
        result = RequestLogRepository(db).stats(limit)
        result["recentLogs"] = [
            RequestLogOut.model_validate(log).model_dump(mode="json", by_alias=True)
            for log in result["recentLogs"]
        ]
        return result
    finally:
        db.close()


def main(argv=None):
    p = argparse.ArgumentParser(description="Voice detection service utilities")
    p.add_argument("--db", default=settings.DATABASE_URL, help="SQLAlchemy database URL")
    sub = p.add_subparsers(dest="command", required=True)

    p_score = sub.add_parser("score", help="Classify a local audio file")
    p_score.add_argument("path", help="Path to the audio file")
    p_score.add_argument("--language", default="English", choices=get_args(Language), help="Declared language")

    p_key = sub.add_parser("create-key", help="Create a new API key")
    p_key.add_argument("owner", help="Owner name for the key")

    p_stats = sub.add_parser("stats", help="Print request statistics")
    p_stats.add_argument("--limit", type=int, default=settings.RECENT_LOGS_LIMIT, help="Number of recent logs")

    args = p.parse_args(argv)
    if args.command == "score":
        out = score(args.path, args.language)
    elif args.command == "create-key":
        out = create_key(args.owner, args.db)
    else:
        out = stats(args.db, args.limit)
    json.dump(out, sys.stdout, indent=2)
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
