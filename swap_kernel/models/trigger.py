"""Swap Trigger — the declarative rule that rewrites an equipment identifier."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from swap_kernel.models.slots import EquipmentType


class SwapTrigger(BaseModel):
    """
    Swap that occurs when equipment matching the trigger conditions is found.
    The equipment ID is changed by `param_id_offset`.

    Triggers are immutable; per-player cooldown state lives in the CooldownBank.
    """

    model_config = ConfigDict(frozen=True)

    id: str                                             # e.g., "LeftWeaponTriggers[0]"
    equip_type: EquipmentType
    sp_effect_id: Optional[int] = Field(default=None, ge=0)   # None == no SpEffect requirement
    param_id: Optional[int] = Field(default=None, ge=0)       # None == any current ID
    param_id_offset: int
    is_permanent: bool = False

    @model_validator(mode="after")
    def _require_condition(self) -> "SwapTrigger":
        if self.sp_effect_id is None and self.param_id is None:
            raise ValueError(
                "At least one of SpEffectIDTrigger or ParamIDTrigger must be set."
            )
        return self

    @property
    def has_effect_condition(self) -> bool:
        return self.sp_effect_id is not None

    def matches_id(self, current_id: int) -> bool:
        """True if `current_id` satisfies the ParamID condition."""
        return self.param_id is None or current_id == self.param_id

    def describe(self) -> str:
        sp_effect = -1 if self.sp_effect_id is None else self.sp_effect_id
        param_id = -1 if self.param_id is None else self.param_id
        result = (
            str(self.param_id + self.param_id_offset)
            if self.param_id is not None
            else f"ID {self.param_id_offset:+d}"
        )
        kind = "permanent" if self.is_permanent else "temporary"
        return (
            f"{self.equip_type.value.capitalize()} "
            f"[SpEffect {sp_effect} & ParamID {param_id}] "
            f"+= {self.param_id_offset} => {result} ({kind})"
        )
