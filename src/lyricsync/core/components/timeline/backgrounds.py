"""Background selection over time-windowed assets."""

from typing import Sequence

from ...models import BackgroundAsset


def background_at(
    assets: Sequence[BackgroundAsset], t: float, fallback: BackgroundAsset
) -> BackgroundAsset:
    """Return the asset whose window covers ``t``.

    With no assets the fallback is always used. When assets exist but none
    covers ``t`` the first asset is held, not the most recent one.
    """
    if not assets:
        return fallback
    for asset in assets:
        if asset.start_time <= t < asset.end_time:
            return asset
    return assets[0]
