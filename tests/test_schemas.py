from catalog_matcher.schemas.products import CatalogPayload, ExtractedProduct, PreviewItem

from .fakes import make_candidate, make_product


class TestExtractedProduct:
    def test_defaults(self):
        product = ExtractedProduct(producto_normalizado="YERBA", precio_final_catalogo=10, cantidad_pack=None)

        assert product.pack_count == 1
        assert product.unit_of_measure == ""
        assert product.confidence == 0.95
        assert product.extraction_provenance == "multimodal_analysis"
        assert product.brand is None

    def test_blank_optional_text_becomes_none(self):
        product = make_product(brand="  ", inferred_category="")

        assert product.brand is None
        assert product.inferred_category is None


class TestPreviewItem:
    def test_total_follows_matches(self):
        item = PreviewItem(extracted_product=make_product(), matches=[make_candidate(1, 0.9)], total_matches=7)

        assert item.total_matches == 1
        assert item.with_matches([]).total_matches == 0

    def test_wire_names(self):
        item = PreviewItem(extracted_product=make_product(), matches=[make_candidate(1, 0.9, adjusted_score=1.0)])

        dumped = item.model_dump(by_alias=True)

        assert set(dumped) >= {"producto_extraido", "coincidencias", "total_coincidencias", "error", "error_llm"}
        assert dumped["coincidencias"][0]["score_ajustado"] == 1.0


class TestCatalogPayload:
    def test_legacy_keys_and_extras(self):
        payload = CatalogPayload.model_validate(
            {"codigo": 5, "rubro": "ACEITES", "marca": "NATURA", "peso": "1.5L", "precio": 10.5, "proveedor": "X"}
        )

        assert payload.code == 5
        assert payload.category == "ACEITES"
        assert payload.normalized_weight == "1.5L"
        assert payload.price == 10.5
        assert payload.model_extra == {"proveedor": "X"}
