"""
Voice listing per speech provider
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException

from ..core import ProviderError, get_logger
from ..models import SpeechProviderType, VoiceResponse
from ..services.use_cases import list_voices

logger = get_logger(__name__, component="voices_routes")

router = APIRouter(tags=["voices"])


@router.get("/voices", response_model=List[VoiceResponse])
async def get_voices(provider: Optional[SpeechProviderType] = None):
    try:
        voices = await list_voices(provider)
    except ProviderError as e:
        logger.warning("Voice listing failed", extra={"provider": e.provider, "error": str(e)})
        raise HTTPException(status_code=502, detail=str(e))

    return [
        VoiceResponse(id=v.id, name=v.name, gender=v.gender, locale=v.locale, provider=v.provider.value)
        for v in voices
    ]
