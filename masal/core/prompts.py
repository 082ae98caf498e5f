"""
Story prompt templates.

Merges a GenerationRequest with a PromptTemplate to produce the
instruction sent to the generative model. The JSON example at the end
of every prompt is the contract the response validator enforces.
"""

from .types import GenerationRequest, LengthSpec, PromptCheck, PromptTemplate, StoryLength, StoryTheme

DEFAULT_TEMPLATE = PromptTemplate(
    version="1.0.0",
    base_prompt=(
        "Sen bir çocuk masalı yazarısın. {childName} adında {age} yaşında bir çocuk için "
        "kişiselleştirilmiş bir masal yaz.\n"
        "\n"
        "Gereksinimler:\n"
        "- Masal Türkçe olmalı\n"
        "- Çocuğun yaşına uygun olmalı\n"
        "- {length} uzunlukta olmalı\n"
        "- {theme} teması işlenmeli\n"
        "- Pozitif ve eğitici mesajlar içermeli\n"
        "- Şiddet, korku veya uygunsuz içerik olmamalı"
    ),
    age_modifiers={
        "3-5": "Çok basit kelimeler kullan, tekrarlar yap, renkler ve sesler ekle.",
        "6-8": "Basit kelimeler kullan, kısa cümleler yaz, hayal gücünü geliştir.",
        "9-12": "Orta seviye kelimeler kullan, daha karmaşık hikaye yapısı kur.",
        "13+": "Zengin kelime dağarcığı kullan, derin karakterler oluştur.",
    },
    theme_prompts={
        StoryTheme.ADVENTURE: "Keşif ve macera dolu bir hikaye anlat. Cesaret ve azmi vurgula.",
        StoryTheme.FRIENDSHIP: "Dostluk, paylaşım ve yardımlaşma konularını işle.",
        StoryTheme.LEARNING: "Öğrenme ve merak konularını eğlenceli şekilde anlat.",
        StoryTheme.FANTASY: "Büyülü kreatürler ve fantastik dünyalar kur.",
        StoryTheme.ANIMALS: "Hayvanlar ve doğa ile ilgili hikaye anlat.",
        StoryTheme.FAMILY: "Aile değerleri ve sevgiyi vurgula.",
        StoryTheme.NATURE: "Doğa sevgisi ve çevre bilincini işle.",
        StoryTheme.MUSIC: "Müzik ve ritim konularını eğlenceli şekilde kur.",
    },
    # Prompt-facing targets; the validator accepts wider ranges
    length_specs={
        StoryLength.SHORT: LengthSpec(word_count=150, range=(100, 200), complexity="simple"),
        StoryLength.MEDIUM: LengthSpec(word_count=300, range=(200, 400), complexity="moderate"),
        StoryLength.LONG: LengthSpec(word_count=500, range=(400, 600), complexity="advanced"),
    },
    safety_instructions=(
        "GÜVENLIK KURALLARI:\n"
        "- Şiddet, korku veya travma içeren içerik yazma\n"
        "- Uygunsuz kelimeler veya kavramlar kullanma\n"
        "- Aile için güvenli ve pozitif mesajlar ver\n"
        "- Çocuğun yaş grubuna uygun içerik üret"
    ),
)

LENGTH_DESCRIPTIONS = {
    StoryLength.SHORT: "kısa",
    StoryLength.MEDIUM: "orta uzunlukta",
    StoryLength.LONG: "uzun",
}

MIN_PROMPT_CHARS = 100
MAX_PROMPT_CHARS = 2000
CHILD_MARKER = "çocuk"
STORY_MARKER = "masal"


def get_age_group(age: int) -> str:
    """Classify an age into one of the four modifier bands."""
    if age <= 5:
        return "3-5"
    if age <= 8:
        return "6-8"
    if age <= 12:
        return "9-12"
    return "13+"


def describe_length(length: StoryLength, spec: LengthSpec) -> str:
    return f"{LENGTH_DESCRIPTIONS[length]} (yaklaşık {spec.word_count} kelime)"


def build_story_prompt(request: GenerationRequest, template: PromptTemplate = DEFAULT_TEMPLATE) -> str:
    """
    Render the generation instruction for a request.

    Order: base template, age modifier, custom elements (if any),
    target word count, safety instructions, JSON shape example.
    """
    theme = StoryTheme(request.theme)
    length = StoryLength(request.length)
    length_spec = template.length_specs[length]
    age_modifier = template.age_modifiers.get(get_age_group(request.age))

    prompt = (
        template.base_prompt
        .replace("{childName}", request.child_name, 1)
        .replace("{age}", str(request.age), 1)
        .replace("{length}", describe_length(length, length_spec), 1)
        .replace("{theme}", template.theme_prompts[theme], 1)
    )

    if age_modifier:
        prompt += f"\n\nYaş grubu özel talimatları: {age_modifier}"

    if request.elements:
        prompt += f"\n\nHikayede bu öğeleri de dahil et: {', '.join(request.elements)}"

    low, high = length_spec.range
    prompt += f"\n\nHikaye uzunluğu: {length_spec.word_count} kelime civarında ({low}-{high} kelime arası)."

    prompt += f"\n\n{template.safety_instructions}"

    prompt += (
        "\n\nCevabını şu JSON formatında ver:\n"
        "{\n"
        '    "title": "Hikaye başlığı",\n'
        '    "content": "Hikaye içeriği",\n'
        '    "wordCount": kelime_sayısı,\n'
        f'    "theme": "{theme.value}",\n'
        '    "language": "tr"\n'
        "}"
    )

    return prompt


def build_retry_prompt(
    request: GenerationRequest,
    previous_error: str,
    template: PromptTemplate = DEFAULT_TEMPLATE,
) -> str:
    """Re-render the prompt with the previous attempt's error appended."""
    base_prompt = build_story_prompt(request, template)

    return (
        f"{base_prompt}\n\n"
        f"ÖNCEKI HATA: {previous_error}\n\n"
        "Bu hatayı düzelterek, geçerli JSON formatında cevap ver. "
        "Daha dikkatli ol ve format kurallarına uy."
    )


def validate_prompt(prompt: str) -> PromptCheck:
    """Guard against a malformed template."""
    errors = []

    if len(prompt) < MIN_PROMPT_CHARS:
        errors.append("Prompt çok kısa")

    if len(prompt) > MAX_PROMPT_CHARS:
        errors.append("Prompt çok uzun")

    if "JSON" not in prompt:
        errors.append("JSON format gereksinimi eksik")

    if CHILD_MARKER not in prompt and STORY_MARKER not in prompt:
        errors.append("Temel hikaye elemanları eksik")

    return PromptCheck(valid=not errors, errors=errors)
