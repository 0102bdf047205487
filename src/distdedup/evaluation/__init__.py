"""Evaluation of detected duplicates against known duplicate pairs."""

from .evaluator import Evaluation, Evaluator, load_gold_standard

__all__ = ["Evaluation", "Evaluator", "load_gold_standard"]
