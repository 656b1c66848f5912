"""Show model for the sync flow."""
from dataclasses import dataclass, field
from pathlib import Path

from episode_sync import constants


@dataclass
class Show:
    """Configuration for the show being synced."""
    name: str  # Short lowercase label, used in flow run names
    show_id: str  # Catalog id, embedded in the episodes URL
    market: str = constants.MARKET
    output_path: Path = constants.OUTPUT_PATH
    token_url: str = constants.TOKEN_URL
    api_base_url: str = constants.API_BASE_URL
    page_size: int = constants.PAGE_SIZE
    title_convention: str = constants.TITLE_CONVENTION  # 'classic' or 'dashed'
    merge_policy: str = constants.MERGE_POLICY  # 'carry-over' or 'replace'
    carry_over_fields: tuple[str, ...] = field(default_factory=lambda: constants.CARRY_OVER_FIELDS)

    @property
    def episodes_url(self) -> str:
        """First page of the show's episode listing."""
        return (f"{self.api_base_url}/shows/{self.show_id}/episodes"
                f"?limit={self.page_size}&market={self.market}")


def get_default_show() -> Show:
    """Return the show configured through the environment."""
    return Show(name=constants.SHOW_NAME, show_id=constants.SHOW_ID)
