import logging
from datetime import datetime

from tqdm.asyncio import tqdm

from .log import LOGGER_NAME


class ProgressBar:
    def __init__(self, name: str, total: int | None = None):
        self.name = name
        bar_format = (
            "{desc}: [{elapsed}<{remaining}, {rate_fmt}] {n_fmt}/{total_fmt} {bar} {percentage:3.0f}%"
            if total is not None
            else "{desc}: [{elapsed}, {rate_fmt}] {n_fmt} {bar}"
        )
        # follows the logger so that --quiet silences progress output too
        disable = not logging.getLogger(LOGGER_NAME).isEnabledFor(logging.INFO)
        self._pbar = tqdm(
            total=total,
            unit="B",
            unit_scale=True,
            unit_divisor=1024,
            bar_format=bar_format,
            dynamic_ncols=True,
            disable=disable,
        )
        self._update_description()

    def _update_description(self):
        time_now_str = datetime.now().strftime("%Y-%m-%d %H:%M:%S,%f")[:-3]
        desc = f"{time_now_str} - INFO - [{self.name}]"
        self._pbar.set_description(desc, refresh=False)

    def update(self, amount: int):
        self._update_description()
        self._pbar.update(amount)

    def close(self):
        self._pbar.close()
