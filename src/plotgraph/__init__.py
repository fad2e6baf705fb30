"""plotgraph: render one tabular dataset as a scatter, line, bar or pie chart.

The interesting part lives in :mod:`plotgraph.charting`; everything else is
thin plumbing (configuration, event bus, logging capture, a Qt host widget).
"""

__version__ = "0.1.0"
