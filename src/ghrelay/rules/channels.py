from collections.abc import Iterable


def resolve_channels(matched: Iterable[str | None], default: str | None) -> list[str]:
    """
    Deduplicate and sort matched channel names, falling back to `default`.

    Every matcher funnels its result through here so the fallback behaves the
    same for prefix, label and status routing. Pass `default=None` where no
    fallback applies.
    """
    channels = sorted({channel for channel in matched if channel})
    if channels:
        return channels
    return [default] if default else []
