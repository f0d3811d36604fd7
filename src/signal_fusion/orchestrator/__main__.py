"""Allow running as: python -m signal_fusion.orchestrator [--config path] --replay snapshots.jsonl."""

import argparse

from signal_fusion.orchestrator.runner import main

parser = argparse.ArgumentParser(description="Signal fusion decision engine")
parser.add_argument("--config", default=None, help="Path to config.yaml")
parser.add_argument("--replay", default=None, help="JSON-lines file of indicator snapshots")
args = parser.parse_args()
main(config_path=args.config, replay_path=args.replay)
