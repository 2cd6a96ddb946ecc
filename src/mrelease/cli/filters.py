"""Shared click options that select release branches."""

from collections.abc import Callable
from typing import ParamSpec, TypeVar

import click

from mrelease.core.predicates import (
    ContainsText,
    ContentFilter,
    MatchesPattern,
    Negated,
    ReleaseBranchSelector,
)

P = ParamSpec("P")
T = TypeVar("T")


def branch_filter_options(f: Callable[P, T]) -> Callable[P, T]:
    """Options narrowing an operation to some release branches."""
    f = click.option(
        "--repo",
        "repos",
        multiple=True,
        help="Only branches of this repo (can be specified multiple times)",
    )(f)
    f = click.option(
        "--brand",
        "brands",
        multiple=True,
        type=click.Choice(["phet", "phet-io"]),
        help="Only branches with this brand (can be specified multiple times)",
    )(f)
    f = click.option(
        "--released/--unreleased",
        "released",
        default=None,
        help="Only released (or only unreleased) branches",
    )(f)
    return f


def build_selector(
    repos: tuple[str, ...], brands: tuple[str, ...], released: bool | None
) -> ReleaseBranchSelector | None:
    """Selector for the given options, or None when nothing was narrowed."""
    if not repos and not brands and released is None:
        return None
    return ReleaseBranchSelector.build(repos, brands, released)


def content_filter_options(f: Callable[P, T]) -> Callable[P, T]:
    """Options describing a predicate over file contents."""
    f = click.option("--contains", help="Match contents containing this text")(f)
    f = click.option("--matches", help="Match contents where this regular expression is found")(f)
    f = click.option("--invert", is_flag=True, help="Match contents the predicate rejects")(f)
    return f


def build_content_filter(
    contains: str | None, matches: str | None, invert: bool
) -> ContentFilter | None:
    """Content filter for the given options, or None when neither was given."""
    content_filter: ContentFilter
    if contains is not None and matches is not None:
        raise click.UsageError("Use only one of --contains and --matches")
    if contains is not None:
        content_filter = ContainsText(contains)
    elif matches is not None:
        content_filter = MatchesPattern(matches)
    else:
        return None
    return Negated(content_filter) if invert else content_filter
