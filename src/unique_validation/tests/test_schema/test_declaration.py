from pydantic import BaseModel, Field

from unique_validation.schema.declaration import FieldSpec, IndexSpec, Schema


class Address(BaseModel):
    city: str = Field(json_schema_extra={"unique": True})
    street: str = ""


class User(BaseModel):
    email: str = Field(json_schema_extra={"unique": "Email {VALUE} is taken"})
    full_name: str = Field(alias="full name")
    address: Address


def _keys(model) -> list:
    return list(model.document["key"].items())


class TestSchema:

    def test_plain_dict_validation(self):
        schema = Schema.model_validate(
            {
                "tree": {"email": {"unique": "taken"}, "address": {"fields": {"city": {"unique": True}}}},
                "indexes": [{"keys": {"name": 1, "age": -1}, "unique": True}],
            }
        )

        assert schema.tree["email"].unique == "taken"
        assert schema.tree["address"].fields["city"].unique is True
        assert schema.indexes[0].keys == {"name": 1, "age": -1}

    def test_iter_fields_uses_dotted_paths(self):
        schema = Schema(
            tree={
                "address": FieldSpec(fields={"city": FieldSpec(unique=True), "geo": FieldSpec(fields={"lat": FieldSpec()})}),
                "email": FieldSpec(),
            }
        )

        assert [path for path, _ in schema.iter_fields()] == [
            "address",
            "address.city",
            "address.geo",
            "address.geo.lat",
            "email",
        ]

    def test_index_models(self):
        """
        Behavior:
                - One single-field unique index per unique tree field, then every
                        declared index with its key order preserved.
        """
        schema = Schema(tree={"email": FieldSpec(unique=True), "nickname": FieldSpec()})
        schema.index({"name": 1, "age": 1}, unique=True, name="person")

        models = schema.index_models()

        assert [_keys(model) for model in models] == [[("email", 1)], [("name", 1), ("age", 1)]]
        assert models[1].document["name"] == "person"
        assert all(model.document["unique"] for model in models)

    def test_index_returns_the_declared_spec(self):
        schema = Schema()

        spec = schema.index({"slug": 1}, unique="slug taken")

        assert isinstance(spec, IndexSpec)
        assert schema.indexes == [spec]

    def test_non_unique_index_is_created_without_unique_flag(self):
        model = IndexSpec(keys={"created": -1}).to_index_model()

        assert model.document["unique"] is False
        assert _keys(model) == [("created", -1)]


class TestSchemaFromModel:

    def test_reads_unique_options_and_aliases(self):
        """
        Behavior:
                - `json_schema_extra={"unique": ...}` declares uniqueness, aliases are
                        the stored field names and BaseModel-typed fields nest.
        """
        schema = Schema.from_model(User, indexes=[{"keys": {"full name": 1, "email": 1}}])

        assert schema.tree["email"].unique == "Email {VALUE} is taken"
        assert "full name" in schema.tree
        assert schema.tree["full name"].unique is False
        assert schema.tree["address"].fields["city"].unique is True
        assert schema.indexes[0].keys == {"full name": 1, "email": 1}

    def test_unique_paths(self):
        schema = Schema.from_model(User)

        unique = [path for path, spec in schema.iter_fields() if spec.unique]

        assert unique == ["email", "address.city"]
