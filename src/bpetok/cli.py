"""Train a tokenizer on a text corpus and save it under an output directory."""

import argparse
import logging
import os
import time
from pathlib import Path
from typing import Final

from datasets import load_dataset

from .factory import get_tokenizer, list_tokenizers
from .pattern import list_patterns

DEFAULT_VOCAB_SIZE: Final[int] = 512
DEFAULT_OUTPUT_DIR: Final[str] = "models"
LOG_LEVEL_ENV: Final[str] = "BPETOK_LOG_LEVEL"

log = logging.getLogger(__name__)


def read_corpus(path: Path) -> str:
    """Read a UTF-8 training corpus from disk."""
    return path.read_text(encoding="utf-8")


def load_corpus(dataset: str, split: str, num_docs: int | None) -> str:
    """Join the ``text`` column of up to `num_docs` documents; full split when None."""
    ds = load_dataset(dataset, split=split)
    if num_docs is not None:
        return "".join(ds[:num_docs]["text"])
    return "".join(ds["text"])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bpetok-train",
        description="Train a byte-level BPE tokenizer and save its .model/.vocab files.",
    )
    parser.add_argument(
        "--tokenizer",
        choices=list_tokenizers(),
        default="regex",
        help="Tokenizer variant to train (default: regex).",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", type=Path, help="UTF-8 text file to train on.")
    source.add_argument(
        "--dataset", type=str, help="Hugging Face dataset with a 'text' column."
    )
    parser.add_argument(
        "--split", type=str, default="train", help="Dataset split (default: train)."
    )
    parser.add_argument(
        "--num-docs",
        type=int,
        default=None,
        help="Number of dataset documents to use (default: full split).",
    )
    parser.add_argument(
        "--vocab-size",
        type=int,
        default=DEFAULT_VOCAB_SIZE,
        help=f"Target vocab size, at least 256 (default: {DEFAULT_VOCAB_SIZE}).",
    )
    parser.add_argument(
        "--pattern",
        choices=[name.lower() for name in list_patterns()],
        default="gpt4",
        help="Split pattern for the regex tokenizer (default: gpt4).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(DEFAULT_OUTPUT_DIR),
        help=f"Directory for the saved model (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Log every learned merge."
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV, "INFO"),
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or INFO).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.input is not None:
        text = read_corpus(args.input)
    else:
        text = load_corpus(args.dataset, args.split, args.num_docs)
    log.info(f"loaded corpus of {len(text):,} chars")

    tokenizer = get_tokenizer(args.tokenizer, pattern=args.pattern)
    args.output_dir.mkdir(parents=True, exist_ok=True)
    file_prefix = args.output_dir / args.tokenizer

    start = time.perf_counter()
    tokenizer.train(text, args.vocab_size, verbose=args.verbose)
    tokenizer.save(str(file_prefix))
    print(f"Took {time.perf_counter() - start:.2f}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
