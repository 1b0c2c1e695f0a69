"""Prompt builders for image generation."""

IMAGE_STYLES = (
    "Realistic",
    "Sketch",
    "Cartoon",
    "Watercolour painting",
    "Oil painting",
)

SYSTEM_PROMPT = (
    "If no style of the image has been provided, use one of the following styles:\n"
    + "".join(f"- {style}\n" for style in IMAGE_STYLES)
    + "\nUse the following prompt to generate the image:\n\n"
)


def build_detailed_prompt(prompt: str) -> str:
    """Return the caller's prompt prefixed with the style instruction, verbatim."""
    return SYSTEM_PROMPT + prompt
