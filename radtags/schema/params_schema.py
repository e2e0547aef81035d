#!/usr/bin/env python

"""Params class with type checking for tag clustering options.

The params are entered by users in the CLI or API, and are saved as a
JSON file next to the tag outputs so that a run can be repeated with
the same settings.
"""

# pylint: disable=no-self-argument, no-name-in-module

from pathlib import Path
from pydantic import BaseModel, Field, field_validator
from loguru import logger

logger = logger.bind(name="radtags")


class Params(BaseModel):
    """Tag clustering parameters for one or more samples."""
    cluster_distance: int = Field(5, description="max quality-weighted distance of a unique to its cluster canonical.")
    quality_threshold: int = Field(20, description="min consensus quality at which two bases confidently disagree.")
    read_threshold: int = Field(2, description="min reads supporting an allele for it to be reported as a tag.")
    cores: int = Field(4, description="max number of samples processed in parallel.")
    outpath: Path = Field(default_factory=lambda: Path("./tags"), validate_default=True, description="directory for tags files, params and stats.")

    class Config:
        """Enables type checking validation when using setattr in API."""
        validate_assignment = True

    def __str__(self):
        return self.model_dump_json(indent=2)

    def __repr__(self):
        return self.model_dump_json(indent=2)

    def save_json(self, path: Path) -> None:
        """Write params to a JSON file."""
        with open(path, 'w', encoding="utf-8") as out:
            out.write(self.model_dump_json(indent=2))
        logger.debug(f"params written to {path}")

    @classmethod
    def load_json(cls, path: Path) -> "Params":
        """Return Params validated from a saved JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    ##################################################################
    # custom validator funcs in addition to type checking.
    ##################################################################

    @field_validator('cluster_distance')
    @classmethod
    def _distance_validator(cls, value: int) -> int:
        """The clustering distance must be a positive integer."""
        if value < 1:
            raise ValueError('cluster_distance must be a positive integer')
        return value

    @field_validator('quality_threshold')
    @classmethod
    def _quality_validator(cls, value: int) -> int:
        if value < 0:
            raise ValueError('quality_threshold cannot be negative')
        return value

    @field_validator('read_threshold', 'cores')
    @classmethod
    def _min_one_validator(cls, value: int) -> int:
        if value < 1:
            raise ValueError('read_threshold and cores must be >= 1')
        return value

    @field_validator('outpath')
    @classmethod
    def _dir_validator(cls, value: Path) -> Path:
        """Outpath cannot have whitespace and is expanded."""
        if ' ' in value.name:
            raise ValueError('outpath cannot contain spaces')
        return value.expanduser().resolve()
