"""feed_ranker - aggregate RSS/Atom subscriptions into one cadence-ranked stream."""

__version__ = "0.1.0"
