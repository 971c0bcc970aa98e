"""Textual rewrite of a category's kustomization.yaml.

The manifest is patched line by line rather than parsed as YAML so that
comments, ordering and formatting of unrelated entries stay untouched.
"""

from __future__ import annotations

import re

_EMPTY_RESOURCES_RE = re.compile(r"resources:[ \t]*$", re.MULTILINE)


def registration_lines(claim_name: str) -> frozenset[str]:
    """Both spellings the registry has used for a claim's resource entry."""
    return frozenset({f"- {claim_name}", f"- ./{claim_name}"})


def rewrite(manifest_text: str, claim_name: str) -> str:
    """Remove *claim_name*'s registration lines from *manifest_text*.

    If the resources list ends up empty, ``resources:`` becomes
    ``resources: []`` so the manifest stays a valid empty list.
    """
    targets = registration_lines(claim_name)
    kept = [line for line in manifest_text.split("\n") if line.strip() not in targets]
    updated = "\n".join(kept)
    if not any(line.strip().startswith("- ") for line in kept):
        updated = _EMPTY_RESOURCES_RE.sub("resources: []", updated, count=1)
    return updated
