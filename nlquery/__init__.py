"""
NLQuery

Natural-language questions in, rows out: a thin HTTP backend that turns a
question into SQL with a language model and runs it against PostgreSQL.
"""

__version__ = "0.1.0"
