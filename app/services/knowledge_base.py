"""
In-memory knowledge base for farming advice.

Crop guidelines, weather advisories, pest control, market prices and soil
management. Built once at import and shared read-only by every request.
"""

from collections import Counter
from dataclasses import dataclass

CATEGORIES: tuple[str, ...] = ("crops", "weather", "pest_control", "market_prices", "soil")


@dataclass(frozen=True)
class Document:
    """A corpus entry. Never mutated after the corpus is built."""

    title: str
    content: str
    category: str
    source: str


CORPUS: tuple[Document, ...] = (
    # Crop guidelines
    Document(
        title="Wheat Cultivation - Rabi Season",
        content=(
            "Wheat is a major rabi crop in India. Best sowing time is October to November. "
            "Ideal soil temperature is 20-25°C. Requires 4-5 irrigations. Popular varieties: "
            "HD-2967, PBW-343, DBW-17. Yield potential: 45-50 quintals per hectare with proper care."
        ),
        category="crops",
        source="ICAR Wheat Guidelines",
    ),
    Document(
        title="Tomato Farming",
        content=(
            "Tomatoes can be grown year-round in most parts of India. Optimal temperature: 20-27°C. "
            "Requires well-drained loamy soil with pH 6.0-7.0. Spacing: 60x45cm. Popular varieties: "
            "Pusa Ruby, Arka Vikas. Common diseases: Early blight, late blight. Use drip irrigation."
        ),
        category="crops",
        source="TNAU Agritech Portal",
    ),
    Document(
        title="Onion Cultivation",
        content=(
            "Onion is grown in Kharif (June-July), Late Kharif (Sept-Oct), and Rabi (Dec-Jan). "
            "Requires sandy loam to clay loam soil. Popular varieties: Agrifound Dark Red, Pusa Red. "
            "Harvest when 50% tops fall. Store in well-ventilated rooms. Avoid waterlogging."
        ),
        category="crops",
        source="NHRDF Guidelines",
    ),
    Document(
        title="Rice Paddy Cultivation",
        content=(
            "Rice is the staple Kharif crop. Sowing: June-July with monsoon onset. Transplanting age: "
            "21-25 days. Water management: 5cm standing water during vegetative stage. Popular varieties: "
            "Swarna, IR-64, Pusa Basmati. Harvest at 80% grain maturity."
        ),
        category="crops",
        source="DRR Hyderabad",
    ),
    # Weather advisories
    Document(
        title="Monsoon Season Advisory",
        content=(
            "During monsoon (June-September), ensure proper field drainage. Avoid fertilizer application "
            "during heavy rains. Watch for fungal diseases. Prepare for Kharif sowing. Check soil moisture "
            "before irrigation. Use raised beds for vegetables to prevent waterlogging."
        ),
        category="weather",
        source="IMD Advisory",
    ),
    Document(
        title="Winter Season Farming Tips",
        content=(
            "Winter (November-February) is ideal for Rabi crops. Protect crops from frost - use mulching "
            "or smoke. Irrigate during evening to prevent frost damage. This season suits wheat, gram, "
            "mustard, peas. Ensure timely sowing before December end."
        ),
        category="weather",
        source="IMD Advisory",
    ),
    Document(
        title="Summer Season Advisory",
        content=(
            "Summer (March-May) requires frequent irrigation. Use mulching to retain soil moisture. "
            "Suitable crops: Watermelon, muskmelon, cucumber, okra. Avoid mid-day irrigation. "
            "Provide shade for nurseries. Watch for pest outbreaks in hot weather."
        ),
        category="weather",
        source="IMD Advisory",
    ),
    # Pest control
    Document(
        title="Aphid Control in Vegetables",
        content=(
            "Aphids are common pests in leafy vegetables and brassicas. Symptoms: curling leaves, "
            "honeydew deposits. Control: Spray neem oil (5ml/L), or use yellow sticky traps. "
            "Biological control: Release ladybird beetles. Avoid excessive nitrogen fertilization."
        ),
        category="pest_control",
        source="ICAR Pest Management",
    ),
    Document(
        title="Stem Borer in Rice",
        content=(
            "Yellow stem borer causes 'dead heart' in vegetative stage and 'white ear' at panicle stage. "
            "Control: Remove and destroy affected tillers. Use pheromone traps at 5/ha. Apply Cartap "
            "hydrochloride 4G at 25kg/ha. Avoid late planting. Maintain field sanitation."
        ),
        category="pest_control",
        source="DRR Advisory",
    ),
    Document(
        title="Fruit Fly in Vegetables",
        content=(
            "Fruit fly damages cucurbits (pumpkin, bitter gourd, cucumber). Maggots bore into fruits. "
            "Control: Use cue-lure traps at 25/ha. Spray Spinosad 45SC at 0.3ml/L. Collect and destroy "
            "fallen fruits. Apply neem cake in soil. Harvest at right maturity."
        ),
        category="pest_control",
        source="IIHR Bangalore",
    ),
    # Market prices (sample data)
    Document(
        title="Current Mandi Prices - Maharashtra",
        content=(
            "Today's wholesale prices (per quintal): Onion (Red): ₹1,800-2,200, Tomato: ₹1,500-1,800, "
            "Potato: ₹1,200-1,500, Wheat: ₹2,200-2,400, Rice: ₹2,800-3,200, Soybean: ₹4,500-4,800. "
            "Prices vary by mandi and quality grade."
        ),
        category="market_prices",
        source="AgriMarket Portal",
    ),
    Document(
        title="MSP Rates 2024-25",
        content=(
            "Minimum Support Prices for major crops: Paddy (Common): ₹2,300/qtl, Wheat: ₹2,275/qtl, "
            "Gram: ₹5,440/qtl, Mustard: ₹5,650/qtl, Cotton (Medium): ₹7,020/qtl. MSP ensures farmers "
            "get minimum guaranteed price. Sell at government procurement centers."
        ),
        category="market_prices",
        source="Ministry of Agriculture",
    ),
    # Soil management
    Document(
        title="Soil Testing Importance",
        content=(
            "Soil testing should be done every 2-3 years. Collect samples from 0-15cm depth, 10-15 spots "
            "per field. Test for N, P, K, pH, EC, organic carbon. Based on results, apply balanced fertilizers. "
            "Avoid over-fertilization. Contact nearest Krishi Vigyan Kendra for testing."
        ),
        category="soil",
        source="Soil Health Card Scheme",
    ),
    Document(
        title="Organic Matter Management",
        content=(
            "Maintain soil organic carbon above 0.5%. Add FYM at 10-15 tonnes/ha annually. Use green "
            "manuring with dhaincha or sunhemp. Incorporate crop residues. Vermicompost is excellent for "
            "improving soil structure. Avoid burning stubble."
        ),
        category="soil",
        source="ICAR Soil Science",
    ),
)


def by_category(tag: str, corpus: tuple[Document, ...] = CORPUS) -> list[Document]:
    """Return documents whose category equals tag (case-insensitive), in corpus order."""
    wanted = (tag or "").strip().lower()
    return [doc for doc in corpus if doc.category.lower() == wanted]


def categories(corpus: tuple[Document, ...] = CORPUS) -> dict[str, int]:
    """Document count per category, in first-seen order."""
    return dict(Counter(doc.category for doc in corpus))


def list_sources(corpus: tuple[Document, ...] = CORPUS) -> list[str]:
    """Distinct source attributions, in corpus order."""
    return list(dict.fromkeys(doc.source for doc in corpus))
