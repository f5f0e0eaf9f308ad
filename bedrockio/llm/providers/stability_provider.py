"""Stability AI Stable Diffusion text-to-image IO."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from bedrockio.llm.interfaces import BedrockModelIO, read_json
from bedrockio.llm.settings import Settings, drop_unset, materialize, setting
from bedrockio.llm.types import ImageResult, ImageStatus

SUCCESS_REASON = "SUCCESS"


@dataclass(frozen=True)
class StableDiffusionSettings:
    """Diffusion parameters.

    Every field defaults to unset and is then omitted from the request so the
    service applies its own default (cfg_scale 7, steps 30, samples 1, random
    seed, no style preset).
    """

    weight: Optional[float] = setting("weight", None, "float")
    cfg_scale: Optional[float] = setting("cfg_scale", None, "float")
    clip_guidance_preset: Optional[str] = setting("clip_guidance_preset", None, "str")
    sampler: Optional[str] = setting("sampler", None, "str")
    samples: Optional[int] = setting("samples", None, "int")
    seed: Optional[int] = setting("seed", None, "int")
    steps: Optional[int] = setting("steps", None, "int")
    style_preset: Optional[str] = setting("style_preset", None, "str")
    extras: Optional[Dict[str, Any]] = setting("extras", None, "dict")
    text_prompts: Optional[List[Any]] = setting("text_prompts", None, "list")


def text_prompt(text: str, weight: Optional[float]) -> Dict[str, Any]:
    """One ``text_prompts`` entry; the weight is omitted when unset."""
    return drop_unset({"text": text, "weight": weight})


def extra_prompts(items: Optional[List[Any]]) -> List[Dict[str, Any]]:
    """Additional (text, weight) prompts, e.g. negative prompts with weight < 0."""
    prompts: List[Dict[str, Any]] = []
    for item in items or []:
        if isinstance(item, Mapping) and isinstance(item.get("text"), str):
            weight = item.get("weight")
            valid = isinstance(weight, (int, float)) and not isinstance(weight, bool)
            prompts.append(text_prompt(item["text"], float(weight) if valid else None))
        elif isinstance(item, (list, tuple)) and len(item) == 2 and isinstance(item[0], str):
            weight = item[1]
            valid = isinstance(weight, (int, float)) and not isinstance(weight, bool)
            prompts.append(text_prompt(item[0], float(weight) if valid else None))
    return prompts


class StabilityDiffusionIO(BedrockModelIO):
    """IO service for Stable Diffusion models."""

    provider = "stability"

    def build_image_request(
        self, model_id: str, description: str, width: int, height: int, settings: Settings = None
    ) -> Dict[str, Any]:
        """Encode a description as a Stable Diffusion body, omitting unset fields."""
        exec_settings = materialize(StableDiffusionSettings, settings)
        prompts = [text_prompt(description, exec_settings.weight)]
        prompts.extend(extra_prompts(exec_settings.text_prompts))
        return drop_unset(
            {
                "text_prompts": prompts,
                "height": height,
                "width": width,
                "cfg_scale": exec_settings.cfg_scale,
                "clip_guidance_preset": exec_settings.clip_guidance_preset,
                "sampler": exec_settings.sampler,
                "samples": exec_settings.samples,
                "seed": exec_settings.seed,
                "steps": exec_settings.steps,
                "style_preset": exec_settings.style_preset,
                "extras": exec_settings.extras,
            }
        )

    def parse_image_response(self, body: Any, *, strict: bool = False) -> ImageResult:
        """Decode the first artifact; its bytes are exposed only on SUCCESS."""
        payload = read_json(body, strict=strict)
        artifacts = payload.get("artifacts")
        if not isinstance(artifacts, list) or not artifacts:
            return ImageResult(status=ImageStatus.NO_DATA)
        artifact = artifacts[0]
        if not isinstance(artifact, Mapping):
            return ImageResult(status=ImageStatus.INVALID)
        finish_reason = artifact.get("finishReason")
        image = artifact.get("base64")
        seed = artifact.get("seed") if isinstance(artifact.get("seed"), int) else None
        if finish_reason is None or image is None:
            return ImageResult(status=ImageStatus.INVALID, finish_reason=finish_reason, seed=seed)
        if finish_reason != SUCCESS_REASON:
            return ImageResult(status=ImageStatus.FAILED, finish_reason=str(finish_reason), seed=seed)
        return ImageResult(status=ImageStatus.SUCCESS, base64=str(image), finish_reason=finish_reason, seed=seed)
