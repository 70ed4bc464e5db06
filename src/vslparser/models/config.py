"""Configuration models for vslparser."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from vslparser.models.entry import EntryKind


class ReaderConfig(BaseModel):
    """How log text is decoded."""

    encoding: str = Field(
        default="utf-8",
        description="Text encoding of varnishlog output"
    )

    errors: Literal["strict", "replace", "ignore", "surrogateescape"] = Field(
        default="replace",
        description="Codec error handler for undecodable bytes"
    )

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate the encoding is known to Python."""
        import codecs

        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown encoding: {v}")
        return v

    model_config = {"frozen": True}


class CommandConfig(BaseModel):
    """Command used by 'vslparse follow' to produce log lines."""

    argv: list[str] = Field(
        default_factory=lambda: ["varnishlog"],
        min_length=1,
        description="Command and arguments (e.g. ['varnishlog', '-g', 'request'])"
    )

    model_config = {"frozen": True}


class OutputConfig(BaseModel):
    """How parsed entries are printed."""

    format: Literal["jsonl", "summary"] = Field(
        default="jsonl",
        description="One JSON object per entry, or a one-line summary"
    )

    kinds: list[EntryKind] = Field(
        default_factory=list,
        description="Transaction kinds to print (empty prints all)"
    )

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for vslparser."""

    reader: ReaderConfig = Field(default_factory=ReaderConfig, description="Input decoding")
    command: CommandConfig = Field(default_factory=CommandConfig, description="Followed command")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")

    model_config = {"frozen": True}
