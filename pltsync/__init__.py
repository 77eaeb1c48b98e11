"""pltsync - incremental PLT maintenance and dialyzer runs for Erlang projects."""

__version__ = "0.3.0"
