"""Avro IDL to schema to Python source generation pipeline."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
