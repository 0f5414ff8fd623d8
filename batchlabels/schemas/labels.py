"""Pydantic models for the repositories, issues and labels named on the command line."""

from typing import Annotated, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

# Issue id meaning "every open issue in the repository".
ALL_ISSUES: Final = "__ALL__"

HEX_COLOR_PATTERN = r"^[0-9a-fA-F]{6}$"


class Label(BaseModel):
    name: str = Field(min_length=1)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)


class Issue(BaseModel):
    """A single issue number, or ``ALL_ISSUES``, plus the labels to apply to it."""

    id: Annotated[int, Field(gt=0)] | Literal["__ALL__"]
    labels: list[Label] = Field(min_length=1)

    @property
    def targets_all(self) -> bool:
        return self.id == ALL_ISSUES


class Repo(BaseModel):
    owner: str = Field(min_length=1)
    name: str = Field(min_length=1)
    issues: list[Issue] = Field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


class RunOptions(BaseModel):
    """Flags that change how the runner selects and touches issues."""

    model_config = ConfigDict(frozen=True)

    only_issues: bool = False
    only_prs: bool = False
    hacktoberfest: bool = False
    dry_run: bool = False
