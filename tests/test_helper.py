import pytest

from descriptors import inventory_file, order_file
from protoc_builder.helper import helper_generator, new_helper_plugin
from protoc_builder.testing import generate_to_string, make_request


def _comments(output: str, prefix: str):
    return [line for line in output.splitlines() if line.startswith("// " + prefix)]


class TestOrderFile:
    def _generate(self):
        return generate_to_string(helper_generator, make_request([order_file()]), "shop/order.proto")

    def test_header_and_package(self):
        lines = self._generate().splitlines()
        assert lines[:4] == [
            "// Code generated by protoc-gen-go-helper. DO NOT EDIT.",
            "// Generated from shop/order.proto",
            "// Source package: shop.v1",
            "package shopv1",
        ]

    def test_one_comment_per_field_in_order(self):
        output = self._generate()
        order_section = output.split("// Message: Order\n")[1].split("// Message: Item")[0]
        assert _comments(order_section, "Field") == [
            "// Field Id: scalar field: int64",
            "// Field Status: enum field: shop.v1.Status",
            "// Field Items: message field: shop.v1.Item",
        ]

    def test_unary_method_has_no_streaming_suffix(self):
        output = self._generate()
        assert _comments(output, "Method") == ["// Method: OrderRequest -> OrderResponse"]
        assert "// Service: OrderService" in output

    def test_helper_struct_and_constructor(self):
        output = self._generate()
        assert (
            "// Message: Order\n"
            "type OrderHelper struct {\n"
            "\tmsg *Order\n"
            "}\n"
            "\n"
            "func NewOrderHelper(msg *Order) *OrderHelper {\n"
            "\treturn &OrderHelper{msg: msg}\n"
            "}\n"
        ) in output

    def test_enum_comment(self):
        assert _comments(self._generate(), "Enum") == ["// Enum: Status (shop.v1.Status)"]


class TestInventoryFile:
    def _generate(self):
        request = make_request([order_file(), inventory_file()], generate=["shop/inventory.proto"])
        return generate_to_string(helper_generator, request, "shop/inventory.proto")

    def test_field_classifications(self):
        assert _comments(self._generate(), "Field") == [
            "// Field Counts: map field",
            "// Field Note: scalar field: string",
            "// Field Card: scalar field: string",
            "// Field Voucher: message field: shop.v1.Inventory.Voucher",
            "// Field State: enum field: shop.v1.Inventory.State",
            "// Field Tags: scalar field: string",
            "// Field LastOrder: message field: shop.v1.Order",
        ]

    def test_oneofs(self):
        assert _comments(self._generate(), "Oneof") == ["// Oneof: XNote", "// Oneof: PaymentMethod"]

    def test_streaming_methods(self):
        assert _comments(self._generate(), "Method") == [
            "// Method: Inventory -> Inventory (streaming)",
            "// Method: Inventory -> Order (streaming)",
            "// Method: Inventory -> Inventory (streaming)",
        ]

    def test_no_enum_section_without_enums(self):
        output = self._generate()
        assert _comments(output, "Enum") == []
        assert "package shop_v1\n\n// Message: Inventory" in output


class TestPluginRun:
    def test_writes_pb_go_per_file(self, capsys):
        response = new_helper_plugin().generate(make_request([order_file(), inventory_file()]))
        assert [f.name for f in response.file] == ["order.pb.go", "inventory.pb.go"]
        assert response.file[0].content.startswith("// Code generated by protoc-gen-go-helper.")
        err = capsys.readouterr().err
        assert "[DEBUG] Generating for shop/order.proto with pattern *.proto" in err
        assert "[DEBUG] Processing file: shop/inventory.proto" in err


class TestHarness:
    def test_unknown_file(self):
        with pytest.raises(LookupError):
            generate_to_string(helper_generator, make_request([order_file()]), "missing.proto")
