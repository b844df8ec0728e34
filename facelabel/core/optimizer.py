"""
Placement optimizer: depth-first search over label format experiments
(position, row count, revert-to-default) for every clashing label, with a
bounded number of global sweeps.

Pure functions: label sets go in as tuples and new tuples come out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from facelabel.core.clash import count_clashes, detect_clashes
from facelabel.core.error_codes import UNRESOLVED_CLASH
from facelabel.core.geometry import fits_within
from facelabel.core.label_builder import LayoutContext, set_label_format
from facelabel.core.config import LabelConfig
from facelabel.core.types import Experiment, Label, Position

logger = logging.getLogger(__name__)

Option = tuple[Position | None, int | None]


@dataclass(frozen=True)
class OptimisationResult:
    labels: tuple[Label, ...]
    clashes_before: int
    clashes_after: int
    attempts: int

    @property
    def resolved(self) -> bool:
        return self.clashes_after == 0


def experiment_options(experiment: Experiment, cfg: LabelConfig) -> tuple[Option, ...]:
    """(position, num_rows) candidates for one experiment; None leaves a knob unchanged."""
    if experiment == Experiment.POSITION:
        return tuple((p, None) for p in cfg.position_candidates)
    if experiment == Experiment.NUM_ROWS:
        return tuple((None, n) for n in cfg.num_rows_candidates)
    if experiment == Experiment.REVERT_TO_DEFAULT:
        return ((cfg.default_position, cfg.default_num_rows),)
    logger.warning("Unknown experiment %r; skipped", experiment)
    return ()


def try_option(
    labels: tuple[Label, ...],
    index: int,
    option: Option,
    ctx: LayoutContext,
) -> tuple[Label, ...]:
    """Apply option to labels[index] and re-run clash detection on the whole set."""
    position, num_rows = option
    candidate = set_label_format(labels[index], ctx, position=position, num_rows=num_rows)
    trial = labels[:index] + (candidate,) + labels[index + 1:]
    trial = detect_clashes(trial, ctx.people)
    if not fits_within(candidate.box.w, candidate.box.h, ctx.bounds, ctx.margin):
        # wider/taller than the image: never accepted
        trial = trial[:index] + (trial[index].with_clash(True),) + trial[index + 1:]
    return trial


def optimise_label(
    labels: tuple[Label, ...],
    index: int,
    experiments: tuple[Experiment, ...],
    ctx: LayoutContext,
) -> tuple[tuple[Label, ...], bool]:
    """
    Search for a clash-free format of labels[index].

    The last experiment is taken first; for each of its options the shorter
    remaining list is explored before the option itself is tried. Returns the
    new label set and whether the label ended clash-free. On failure the label
    keeps the last configuration tried.
    """
    if not experiments:
        return labels, not labels[index].clash
    experiment = experiments[-1]
    remaining = experiments[:-1]
    for option in experiment_options(experiment, ctx.label_config):
        if remaining:
            labels, resolved = optimise_label(labels, index, remaining, ctx)
            if resolved:
                return labels, True
        logger.debug("Label %r: trying %s=%s", labels[index].text, experiment.value, option)
        labels = try_option(labels, index, option, ctx)
        if not labels[index].clash:
            label = labels[index]
            logger.debug("Label %r resolved: %s, rows=%d", label.text, label.position.value, label.num_rows)
            return labels, True
    return labels, False


def optimise_labels(
    labels: tuple[Label, ...],
    ctx: LayoutContext,
    warnings: list[str] | None = None,
) -> OptimisationResult:
    """
    Detect clashes, then sweep clashing labels through optimise_label: insertion
    order on the first attempt, reversed order on the second. Clashes left after
    the last attempt are accepted and logged.
    """
    cfg = ctx.label_config
    labels = detect_clashes(labels, ctx.people)
    before = count_clashes(labels)
    attempts = 0
    for attempt in range(1, max(0, cfg.max_optimise_attempts) + 1):
        if count_clashes(labels) == 0:
            break
        attempts = attempt
        order = range(len(labels)) if attempt % 2 == 1 else range(len(labels) - 1, -1, -1)
        logger.debug("Optimise sweep %d (%s order)", attempt, "standard" if attempt % 2 == 1 else "reversed")
        for i in order:
            if not labels[i].clash:
                continue
            labels, _ = optimise_label(labels, i, tuple(cfg.format_experiments), ctx)

    after = count_clashes(labels)
    if after:
        names = ", ".join(label.text for label in labels if label.clash)
        logger.warning("%s: %d label(s) still overlap after %d sweep(s): %s", UNRESOLVED_CLASH, after, attempts, names)
        if warnings is not None:
            warnings.append(f"{UNRESOLVED_CLASH}: {names}")
    else:
        logger.info("Label optimisation finished: %d clash(es) resolved", before)
    return OptimisationResult(labels=labels, clashes_before=before, clashes_after=after, attempts=attempts)

