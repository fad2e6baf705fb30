"""Qt widgets hosting the chart surface."""
