from fastapi import APIRouter

from app.schemas.rules import RulePack, RulePackSummary
from app.services.rule_packs import get_default_rule_pack, get_rule_pack, list_rule_packs

router = APIRouter(prefix="/api/rule-packs", tags=["Rule Packs"])


@router.get("", response_model=list[RulePackSummary])
async def list_packs():
    default_id = get_default_rule_pack().id
    return [
        RulePackSummary(
            id=pack.id,
            name=pack.name,
            description=pack.description,
            is_default=pack.id == default_id,
        )
        for pack in list_rule_packs()
    ]


# Unknown ids resolve to the default pack rather than 404, same as scoring does.
@router.get("/{pack_id}", response_model=RulePack)
async def get_pack(pack_id: str):
    return get_rule_pack(pack_id)
