import logging
import signal
import sys
import json
import time
import argparse
import threading
from typing import Optional, List

from pydantic import ValidationError

from matchengine.config_loader import load_config, MatchingConfig, ResultPolicy, config_summary
from matchengine.errors import ConfigError, CandidateEvaluationError
from matchengine.scorer import MatchingService, rank_matches

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Set by SIGINT/SIGTERM so a long batch stops early and still reports what it scored
stop_event = threading.Event()


def signal_handler(sig, frame):
    logger.info("Shutdown signal received")
    stop_event.set()


def load_batch_data(batch_file_path: str) -> dict | None:
    """Load a scoring batch from a JSON file."""
    logger.info(f"Loading batch from {batch_file_path}")
    try:
        with open(batch_file_path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error(f"Batch file not found: {batch_file_path}")
        return None
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in batch file: {e}")
        return None

    if not isinstance(data, dict):
        logger.error("Batch file must contain a JSON object")
        return None
    return data


def run_batch(data: dict, config: MatchingConfig, policy: ResultPolicy) -> dict:
    """
    Score a batch in either direction and return a JSON-ready report.

    Accepted shapes:
        {"provider": {...}, "requesters": [...], "preferences": {...}}
        {"requester": {...}, "providers": [...], "preferences": {...}}
    """
    service = MatchingService(config)
    preferences = data.get('preferences')

    if 'provider' in data:
        batch = service.score_batch(data['provider'], data.get('requesters') or [], preferences, stop_event=stop_event)
        key = 'requester'
    elif 'requester' in data:
        batch = service.score_providers_batch(data['requester'], data.get('providers') or [], preferences, stop_event=stop_event)
        key = 'provider'
    else:
        raise ValueError("Batch must contain either 'provider' + 'requesters' or 'requester' + 'providers'")

    ranked = rank_matches(batch.matches, policy)
    return {
        'matches': [
            {key: candidate.id, **result.to_dict()}
            for candidate, result in ranked
        ],
        'rejected': [
            {'id': r.candidate_id, 'reason_code': r.reason_code, 'message': r.message}
            for r in batch.rejected
        ],
        'weights': batch.weights.active() if batch.weights else {},
        'weight_diagnostics': batch.weight_diagnostics,
        'cancelled': batch.cancelled,
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Compatibility matching: score and rank a candidate batch")
    parser.add_argument('--input', required=True, help='JSON batch file')
    parser.add_argument('--config', default=None, help='YAML matching configuration (default: config.yaml)')
    parser.add_argument('--top-k', type=int, default=None, help='Keep only the K best matches')
    parser.add_argument('--min-score', type=int, default=None, help='Drop matches scoring below this (0-100)')
    parser.add_argument('--output', default=None, help='Write the report here instead of stdout')
    parser.add_argument('--verbose', action='store_true', help='Debug logging')
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        config = load_config(args.config) if args.config else load_config()
    except ConfigError as e:
        if args.config:
            logger.error(f"Failed to load configuration: {e}")
            return 2
        logger.warning(f"No usable default configuration ({e}); using built-in defaults")
        config = MatchingConfig()
    logger.info(f"Matching settings: {config_summary(config)}")

    overrides = {}
    if args.top_k is not None:
        overrides['top_k'] = args.top_k
    if args.min_score is not None:
        overrides['min_score'] = args.min_score
    try:
        policy = ResultPolicy.model_validate({**config.result_policy.model_dump(), **overrides})
    except ValidationError as e:
        logger.error(f"Invalid result policy: {e}")
        return 2

    data = load_batch_data(args.input)
    if data is None:
        return 1

    start = time.time()
    try:
        report = run_batch(data, config, policy)
    except (CandidateEvaluationError, ValueError) as e:
        logger.error(f"Cannot score batch: {e}")
        return 1
    logger.info(f"Batch scored in {time.time() - start:.3f}s: "
                f"{len(report['matches'])} match(es), {len(report['rejected'])} rejected")

    output = json.dumps(report, indent=2)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(output + "\n")
    else:
        sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
