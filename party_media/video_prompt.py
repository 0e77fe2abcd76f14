import copy

from .models import SceneAsset

# Veo-style prompt exported next to every image. Only character_description,
# scene, dialogue and aspect_ratio change per asset.
VIDEO_PROMPT_TEMPLATE = {
    "character_description": "",
    "scene": "",
    "dialogue": "■ Olá, pessoal! Tenho uma novidade incrível para vocês!",
    "camera": "Gentle zoom-in, starting slightly wider and slowly moving closer to the man's face, maintaining eye contact with the viewer. Slight breeze motion visible in his shirt.",
    "lighting": "Bright, natural daylight, reflecting off the clear blue sky and calm ocean, creating a serene and inviting mood.",
    "style": "cinematic, realistic, bright tropical tones",
    "audio": "Native voice recording synced with the dialogue. Gentle, uplifting ukulele or acoustic guitar music begins softly, reminiscent of a relaxed beach vibe.",
    "caption_instruction": "Dialogue is in Portuguese (Brazil). Avoid: subtitles, closed captions, overlays, embedded text, visual words.",
    "negative_prompts": "subtitles, captions, on_screen_text, typography, visual text",
    "flow_usage": {
        "type": "jump",
        "transition_note": "Transition to the man holding a cold drink, subtly revealing the party theme."
    },
    "model_requirement": "Veo3_native_audio",
    "resolution": "4K",
    "aspect_ratio": "16:9",
    "frame_rate": "24fps"
}


def build_video_prompt(character_description: str, asset: SceneAsset, aspect_ratio: str) -> dict:
    prompt = copy.deepcopy(VIDEO_PROMPT_TEMPLATE)
    prompt["character_description"] = character_description
    prompt["scene"] = asset.scene
    prompt["dialogue"] = asset.dialogue
    prompt["aspect_ratio"] = aspect_ratio
    return prompt
