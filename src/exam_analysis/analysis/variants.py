"""
Per-variant analysis for comparing variants of one exam.
"""

import dataclasses
import logging
from collections.abc import Sequence

from exam_analysis.analysis.answers import build_variant_index
from exam_analysis.analysis.config import AnalysisConfig
from exam_analysis.analysis.data_models import AnalysisResult
from exam_analysis.analysis.exam import analyze_exam
from exam_analysis.analysis.exceptions import NoResponsesError
from exam_analysis.core.constants import UNKNOWN_EXAM_TITLE
from exam_analysis.core.data_models import ExamVariant, StudentResponse

logger = logging.getLogger(__name__)


def split_by_variant(
    responses: Sequence[StudentResponse], variants: Sequence[ExamVariant]
) -> dict[str, list[StudentResponse]]:
    """
    Group responses by variant code, in order of first appearance.

    Responses with an empty code, or a code no variant carries, are
    dropped.
    """
    known = build_variant_index(variants)
    groups: dict[str, list[StudentResponse]] = {}
    dropped = 0
    for response in responses:
        if not response.variant_code or response.variant_code not in known:
            dropped += 1
            continue
        groups.setdefault(response.variant_code, []).append(response)

    if dropped:
        logger.warning(
            f"Dropped {dropped} responses with an empty or unknown "
            "variant code"
        )
    return groups


def analyze_by_variant(
    variants: Sequence[ExamVariant],
    responses: Sequence[StudentResponse],
    config: AnalysisConfig | None = None,
) -> list[AnalysisResult]:
    """
    Analyze each variant separately.

    Each group of responses sharing a known variant code is analyzed
    against its own variant definition, titled
    "<exam title> - Variant <code>".

    Returns:
        One AnalysisResult per variant with responses, in order of first
        appearance. An empty list when nothing is left to analyze.
    """
    config = config if config is not None else AnalysisConfig()
    variant_index = build_variant_index(variants)

    results = []
    for code, group in split_by_variant(responses, variants).items():
        variant = variant_index[code]
        base_title = (
            config.exam_title or variant.exam_title or UNKNOWN_EXAM_TITLE
        )
        variant_config = dataclasses.replace(
            config, exam_title=f"{base_title} - Variant {code}"
        )
        logger.debug(f"Analyzing variant {code}: {len(group)} responses")
        try:
            results.append(analyze_exam([variant], group, variant_config))
        except NoResponsesError:
            logger.warning(
                f"Variant {code}: no responses left after filtering"
            )
    return results
