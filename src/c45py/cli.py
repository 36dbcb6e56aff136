"""Command line entry point: ``c45py train`` and ``c45py predict``."""

from __future__ import annotations

import argparse
import sys

from loguru import logger

from .exceptions import DatasetError, ModelFormatError
from .logging import enable_logging
from .splitter import THRESHOLD_STRATEGIES
from .table import load_csv, read_raw_csv
from .tree import UNKNOWN_LABEL, C45Classifier

PREDICTION_COLUMN = "Prediction"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="c45py", description="C4.5-style decision tree classifier")
    commands = parser.add_subparsers(dest="command", required=True, metavar="{train,predict}")

    train = commands.add_parser("train", help="Fit a tree on a labelled CSV file and save it as JSON")
    train.add_argument("-i", "--input", required=True, help="Training CSV file")
    train.add_argument("-t", "--target", required=True, help="Name of the label column")
    train.add_argument("-o", "--output", required=True, help="Model file to write")
    train.add_argument("--threshold-strategy", choices=THRESHOLD_STRATEGIES, default="midpoint",
                       help="How numeric and date thresholds are chosen (default: midpoint)")
    train.add_argument("-v", "--verbose", action="store_true", help="Log every split")

    predict = commands.add_parser("predict", help="Classify the rows of a CSV file with a saved model")
    predict.add_argument("-i", "--input", required=True, help="CSV file to classify")
    predict.add_argument("-m", "--model", required=True, help="Model file written by 'train'")
    predict.add_argument("-o", "--output", required=True,
                         help=f"CSV file to write, with an extra '{PREDICTION_COLUMN}' column")
    predict.add_argument("--unknown-label", default=UNKNOWN_LABEL,
                         help="Prediction for rows missing a tested attribute")
    predict.add_argument("-v", "--verbose", action="store_true", help="Log prediction fallbacks")
    return parser


def train(args: argparse.Namespace) -> None:
    dataset = load_csv(args.input, label=args.target)
    clf = C45Classifier(threshold_strategy=args.threshold_strategy).fit(dataset)
    clf.save(args.output)


def predict(args: argparse.Namespace) -> None:
    frame = read_raw_csv(args.input)
    clf = C45Classifier.load(args.model, unknown_label=args.unknown_label)
    frame[PREDICTION_COLUMN] = clf.predict(frame)
    frame.to_csv(args.output, index=False)
    logger.info("Predictions saved to {}", args.output)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    with enable_logging(level="DEBUG" if args.verbose else "INFO"):
        try:
            if args.command == "train":
                train(args)
            else:
                predict(args)
        except (DatasetError, ModelFormatError, OSError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
