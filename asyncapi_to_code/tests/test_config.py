from asyncapi_to_code.pipeline.config import CodeGeneratorConfig


class TestConfig:
    def test_defaults(self):
        config = CodeGeneratorConfig()
        assert config.inner_suffix == "Inner"
        assert config.variant_suffix == "Variant"
        assert config.strict_discriminator is False
        assert config.catch_all_field_name == "additional_properties"

    def test_from_dict_ignores_unknown_keys(self):
        config = CodeGeneratorConfig.from_dict({"strict_discriminator": True, "language": "cs"})
        assert config.strict_discriminator is True
        assert not hasattr(config, "language")

    def test_to_dict(self):
        data = CodeGeneratorConfig(item_suffix="Entry").to_dict()
        assert data["item_suffix"] == "Entry"
        assert CodeGeneratorConfig.from_dict(data) == CodeGeneratorConfig(item_suffix="Entry")
