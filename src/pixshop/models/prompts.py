"""Instruction templates sent to the generative model.

One builder per edit kind plus the analysis and translation instructions.
"""

import json

from ..raster.base import Point

_SKIN_TONE_POLICY = """Safety & Ethics Policy:
- You MUST fulfill requests to adjust skin tone, such as 'give me a tan', 'make my skin darker', or 'make my skin lighter'. These are standard photo enhancements.
- You MUST REFUSE any request to change a person's fundamental race or ethnicity. If the request is ambiguous, do not change racial characteristics."""


def localized_edit(user_prompt: str, hotspot: Point) -> str:
    return f"""You are an expert photo editor AI. Perform a natural, localized edit on the provided image based on the user's request.
User Request: "{user_prompt}"
Edit Location: Focus on the area around pixel coordinates (x: {int(hotspot.x)}, y: {int(hotspot.y)}).

Editing Guidelines:
- The edit must be realistic and blend seamlessly with the surrounding area.
- The rest of the image (outside the immediate edit area) must remain identical to the original.

{_SKIN_TONE_POLICY}

Output: Return ONLY the final edited image. Do not return text."""


def filter_prompt(user_prompt: str) -> str:
    return f"""You are an expert photo editor AI. Apply a stylistic filter to the entire image based on the user's request. Do not change the composition or content, only apply the style.
Filter Request: "{user_prompt}"

Safety & Ethics Policy:
- Filters may subtly shift colors, but they must not alter a person's fundamental race or ethnicity.
- You MUST REFUSE any request that explicitly asks to change a person's race.

Output: Return ONLY the final filtered image. Do not return text."""


def adjustment(user_prompt: str) -> str:
    return f"""You are an expert photo editor AI. Perform a natural, global adjustment to the entire image based on the user's request.
User Request: "{user_prompt}"

Editing Guidelines:
- The adjustment must be applied across the entire image.
- The result must be photorealistic.

{_SKIN_TONE_POLICY}

Output: Return ONLY the final adjusted image. Do not return text."""


REMOVE_BACKGROUND = (
    "You are an expert photo editor AI. Identify the main subject(s) in the image and "
    "completely remove the background, replacing it with transparency. The output must be "
    "a PNG image with an alpha channel for the transparent areas. Do not add any new "
    "background or color. Return ONLY the final image."
)

UPSCALE = (
    "You are an expert photo editor AI. Upscale this image to twice its original resolution. "
    "Enhance details, increase sharpness, and keep the result photorealistic. Maintain the "
    "original aspect ratio and content."
)

STYLE_TRANSFER = (
    "You are an expert style transfer AI. Apply the artistic style, color palette, and texture "
    "of the second image (the style image) to the content and composition of the first image "
    "(the content image). Keep the subjects and structure of the content image. Return ONLY "
    "the final image."
)


def expand(user_prompt: str) -> str:
    context = user_prompt.strip() or "none given, extend the scene naturally"
    return f"""You are an expert photo editor AI specialised in outpainting. The canvas of the provided image has been enlarged and now has transparent areas. Fill the transparent areas realistically, extending the original content into one larger, cohesive scene.

Context for the new areas: "{context}"

Output: Return ONLY the final, filled-in image."""


def lasso_inpaint(user_prompt: str) -> str:
    return f"""You are an expert photo editor AI. The first image is the photo to edit. The second image is a black and white mask: edit ONLY the region that is white in the mask, and keep every pixel in the black region identical to the original.
User Request: "{user_prompt}"

{_SKIN_TONE_POLICY}

Output: Return ONLY the final edited image. Do not return text."""


SUGGESTIONS = (
    "Analyze the provided image and suggest three specific, actionable improvements a user "
    "could make. For each suggestion give a concise button name (e.g. 'Enhance Colors') and "
    "a detailed prompt an AI photo editor can execute. Return a JSON array of objects."
)

SUGGESTIONS_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "name": {"type": "STRING", "description": "Short name suitable for a button label."},
            "prompt": {"type": "STRING", "description": "Detailed prompt that performs the edit."},
        },
        "required": ["name", "prompt"],
    },
}

REVERSE_PROMPT = (
    "Describe the provided image as a single detailed text-to-image prompt that would "
    "reproduce its subject, composition, and style. Return a JSON object with a 'prompt' field."
)

REVERSE_PROMPT_SCHEMA = {
    "type": "OBJECT",
    "properties": {"prompt": {"type": "STRING"}},
    "required": ["prompt"],
}


def translation(strings: dict[str, str], target_language: str) -> str:
    return f"""Translate the values of the following JSON object into the language with code "{target_language}". Keep the exact JSON structure and keys. Only translate the string values. Do not translate placeholder variables in braces such as {{currentStep}}, {{totalSteps}} or {{count}}.

Input JSON:
{json.dumps(strings, indent=2, ensure_ascii=False)}

Output the translated JSON object only."""
