"""Hand-built FileDescriptorProtos standing in for protoc output."""
from google.protobuf import descriptor_pb2 as d2

FDP = d2.FieldDescriptorProto


def _field(msg, name, number, type_, type_name="", label=FDP.LABEL_OPTIONAL, **kwargs):
    return msg.field.add(name=name, number=number, type=type_, type_name=type_name, label=label, **kwargs)


def order_file() -> d2.FileDescriptorProto:
    """shop/order.proto: Order{id, status, items}, Item, and a unary OrderService."""
    f = d2.FileDescriptorProto(name="shop/order.proto", package="shop.v1", syntax="proto3")
    f.options.go_package = "example.com/shop/v1;shopv1"

    status = f.enum_type.add(name="Status")
    status.value.add(name="STATUS_UNKNOWN", number=0)
    status.value.add(name="STATUS_PAID", number=1)
    status.value.add(name="STATUS_SHIPPED", number=5)

    order = f.message_type.add(name="Order")
    _field(order, "id", 1, FDP.TYPE_INT64)
    _field(order, "status", 2, FDP.TYPE_ENUM, ".shop.v1.Status")
    _field(order, "items", 3, FDP.TYPE_MESSAGE, ".shop.v1.Item", FDP.LABEL_REPEATED)

    item = f.message_type.add(name="Item")
    _field(item, "sku", 1, FDP.TYPE_STRING)
    _field(item, "quantity", 2, FDP.TYPE_INT32)

    req = f.message_type.add(name="OrderRequest")
    _field(req, "order_id", 1, FDP.TYPE_INT64)

    resp = f.message_type.add(name="OrderResponse")
    _field(resp, "order", 1, FDP.TYPE_MESSAGE, ".shop.v1.Order")

    svc = f.service.add(name="OrderService")
    svc.method.add(name="Get", input_type=".shop.v1.OrderRequest", output_type=".shop.v1.OrderResponse")
    return f


def inventory_file() -> d2.FileDescriptorProto:
    """shop/inventory.proto: maps, oneofs, proto3 optional, nested types, streaming RPCs."""
    f = d2.FileDescriptorProto(
        name="shop/inventory.proto",
        package="shop.v1",
        syntax="proto3",
        dependency=["shop/order.proto"],
    )

    inv = f.message_type.add(name="Inventory")
    _field(inv, "counts", 1, FDP.TYPE_MESSAGE, ".shop.v1.Inventory.CountsEntry", FDP.LABEL_REPEATED)
    _field(inv, "note", 2, FDP.TYPE_STRING, proto3_optional=True, oneof_index=0)
    _field(inv, "card", 3, FDP.TYPE_STRING, oneof_index=1)
    _field(inv, "voucher", 4, FDP.TYPE_MESSAGE, ".shop.v1.Inventory.Voucher", oneof_index=1)
    _field(inv, "state", 5, FDP.TYPE_ENUM, ".shop.v1.Inventory.State")
    _field(inv, "tags", 6, FDP.TYPE_STRING, label=FDP.LABEL_REPEATED)
    _field(inv, "last_order", 7, FDP.TYPE_MESSAGE, ".shop.v1.Order")
    inv.oneof_decl.add(name="_note")
    inv.oneof_decl.add(name="payment_method")

    entry = inv.nested_type.add(name="CountsEntry")
    entry.options.map_entry = True
    _field(entry, "key", 1, FDP.TYPE_STRING)
    _field(entry, "value", 2, FDP.TYPE_SINT32)

    voucher = inv.nested_type.add(name="Voucher")
    _field(voucher, "code", 1, FDP.TYPE_STRING)

    state = inv.enum_type.add(name="State")
    state.value.add(name="OPEN", number=0)
    state.value.add(name="CLOSED", number=-1)

    svc = f.service.add(name="StockService")
    svc.method.add(name="Watch", input_type=".shop.v1.Inventory", output_type=".shop.v1.Inventory",
                   server_streaming=True)
    svc.method.add(name="Upload", input_type=".shop.v1.Inventory", output_type=".shop.v1.Order",
                   client_streaming=True)
    svc.method.add(name="Sync", input_type=".shop.v1.Inventory", output_type=".shop.v1.Inventory",
                   client_streaming=True, server_streaming=True)
    return f


def empty_file(name: str = "empty.proto", package: str = "") -> d2.FileDescriptorProto:
    return d2.FileDescriptorProto(name=name, package=package, syntax="proto3")
