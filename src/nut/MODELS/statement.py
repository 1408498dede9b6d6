"""
Models for the statements of a build script.
"""
from typing import List
from enum import Enum
from pydantic import BaseModel, ConfigDict


class Directive(str, Enum):
    """
    The fixed set of instructions a build script may use.
    """
    FROM = "FROM"
    RUN = "RUN"
    ENV = "ENV"
    WORKDIR = "WORKDIR"
    ADD = "ADD"
    COPY = "COPY"
    LABEL = "LABEL"
    EXPOSE = "EXPOSE"
    MAINTAINER = "MAINTAINER"
    USER = "USER"
    VOLUME = "VOLUME"
    STOPSIGNAL = "STOPSIGNAL"
    CMD = "CMD"
    ENTRYPOINT = "ENTRYPOINT"


class Statement(BaseModel):
    """
    Represents a single logical instruction, after continuation lines are joined.
    """
    model_config = ConfigDict(frozen=True)

    directive: Directive
    arguments: List[str] = []
    raw: str
    line: int = 0
