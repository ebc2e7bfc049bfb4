# flake8: noqa: E501

"""Catalog image extraction prompt."""

from typing import Optional

from .base import Prompt


class CatalogExtractionPrompt(Prompt):
    """Prompt for reading products and prices off a wholesale catalog photo."""

    def __init__(self):
        """Initialize the prompt."""
        system_prompt = (
            "You are a specialist in reading wholesale supermarket price catalogs from Argentina and Latin America. "
            "You read product names, brands, pack sizes and prices exactly as printed."
        )

        template = """
Analyze the attached catalog image{company_hint} and list EVERY product that has a visible price.

Rules:
1. Price:
   - "catalog_price" is the price exactly as printed in the image. Never compute it.
   - Do NOT compute unit prices or prices before discount.
   - If a discount is printed ("%", "OFF", "oferta"), copy the percentage into "discount_percent", otherwise null.
2. Brand:
   - Use the complete brand name. "HIGIENOL PLUS Papel..." -> "HIGIENOL PLUS"; "MAYONESA CADA DIA" -> "CADA DIA"; "AC.GIRASOL NATURA" -> "NATURA".
3. Packs:
   - "pack_count" is how many units the printed price buys ("12 x 250 GR" -> 12). Use 1 for single items.
   - "unit_of_measure" is the measure of ONE unit ("12 x 250 GR" -> "250g", "1,5 LT" -> "1.5L", "1KG" -> "1kg").
   - For goods sold by count use the count word as unit: "sobre", "unidad", "par", "paquete", "pack", "tableta", "blister", "frasco".
   - "unit_count" is the number of sachets/units/capsules inside one item when printed ("caja x 20 sobres" -> 20), otherwise null.
   - "quantity_description" is the full quantity text ("12 x 250g").
4. Subtype:
   - "product_subtype" is the specific variety: oils "girasol", "mezcla", "oliva"; flours "000", "0000", "integral", "leudante"; milk "entera", "descremada"; sodas "cola", "zero", "light"; rice "largo", "yamani". Infer it when the packaging makes it obvious, use "standard" only as a last resort.
5. "inferred_category" is a short supermarket category ("aceites", "harinas", "limpieza", ...).
6. Use lowercase for subtype and category. Use null for anything you cannot determine.

Respond ONLY with a JSON array, no extra text:
[
  {{
    "normalized_name": "MAYONESA CADA DIA",
    "product_subtype": "standard",
    "catalog_price": 646.78,
    "discount_percent": null,
    "brand": "CADA DIA",
    "pack_count": 12,
    "unit_of_measure": "250g",
    "unit_count": null,
    "quantity_description": "12 x 250g",
    "inferred_category": "aderezos"
  }}
]
"""
        super().__init__(template=template, system_prompt=system_prompt)

    def build(self, company: Optional[str] = None) -> str:
        """Format the prompt for one catalog image."""
        company_hint = f" from the wholesaler {company}" if company else ""
        return self.format(company_hint=company_hint)


def create_catalog_extraction_prompt() -> CatalogExtractionPrompt:
    """Create a catalog extraction prompt instance."""
    return CatalogExtractionPrompt()
