"""Presentation adapter: triage buckets and labels."""

from reviewqueue.presentation.buckets import (
    BUCKET_TITLES,
    CI_LABELS,
    Bucket,
    RollupGroup,
    bucket_prs,
    ordinal,
    queue_status_label,
    rollup_setting_label,
    wait_reason_label,
)

__all__ = [
    "BUCKET_TITLES",
    "CI_LABELS",
    "Bucket",
    "RollupGroup",
    "bucket_prs",
    "ordinal",
    "queue_status_label",
    "rollup_setting_label",
    "wait_reason_label",
]
