"""MCP Server for the storefront inventory and checkout flows."""

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from .auth import AuthManager
from .checkout import CheckoutController
from .config import settings
from .exceptions import ValidationError
from .inventory import InventoryController
from .models import SubmissionStatus
from .storage import JsonFileStore
from .storefront_client import StorefrontClient

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("storefront-mcp-server")

# Initialize server
app = Server("storefront-mcp-server")

# Global state
inventory: InventoryController
checkout: CheckoutController
client: Optional[StorefrontClient] = None


def render_catalog(controller: InventoryController, base_url: str) -> str:
    """Render the catalog summary and table as text."""
    lines = [
        f"Total Stock Items: {controller.total_item_count}",
        f"Total Value: ${controller.total_value}",
    ]
    if not controller.catalog:
        lines.append("\nNo stock items added yet.")
        return "\n".join(lines)

    lines.append("\nStock Items:")
    for i, item in enumerate(controller.catalog, 1):
        lines.append(f"\n{i}. {item.name}")
        lines.append(f"   Category: {item.category.value}")
        lines.append(f"   Price: ${item.display_price}")
        lines.append(f"   Quantity: {item.qty}")
        image_url = item.image_url(base_url)
        if image_url:
            lines.append(f"   Image: {image_url}")
    return "\n".join(lines)


def render_checkout(controller: CheckoutController) -> str:
    """Render the order summary and payment form state as text."""
    lines = ["Order Summary:"]
    if controller.cart:
        for entry in controller.cart:
            lines.append(f"  - {entry.label} ({entry.size}) x{entry.quantity}: ${entry.final_price}")
    else:
        lines.append("  No items in cart")
    lines.append(f"\nTotal: ${controller.total_amount}")
    lines.append(f"Payment method: {controller.payment_method.value}")

    if controller.card_fields_visible:
        card = controller.card_draft
        filled = sum(bool(value) for value in (card.cardholder_name, card.card_number, card.expiry_date, card.cvv))
        lines.append(f"Card details: {filled}/4 fields filled")

    if controller.submission.status == SubmissionStatus.IN_FLIGHT:
        lines.append("Status: Processing...")
    elif controller.submission.status == SubmissionStatus.FAILED:
        lines.append(f"Error: {controller.submission.message}")
    return "\n".join(lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    return [
        Resource(
            uri=AnyUrl("storefront://catalog"),
            name="Stock Catalog",
            mimeType="application/json",
            description="Stock items confirmed by the item service",
        ),
        Resource(
            uri=AnyUrl("storefront://cart"),
            name="Shopping Cart",
            mimeType="application/json",
            description="Cart entries read from local storage",
        ),
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str == "storefront://catalog":
        return json.dumps([item.model_dump(mode="json") for item in inventory.catalog], indent=2)

    if uri_str == "storefront://cart":
        return json.dumps([entry.model_dump(mode="json", by_alias=True) for entry in checkout.cart], indent=2)

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="storefront_list_items",
            description="Show the stock catalog with item count and total stock value",
            inputSchema={
                "type": "object",
                "properties": {
                    "refresh": {
                        "type": "boolean",
                        "description": "Reload the catalog from the item service first (default: false)",
                        "default": False,
                    },
                },
            },
        ),
        Tool(
            name="storefront_update_item_draft",
            description="Set fields of the new stock item form (no validation until submit)",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Stock name"},
                    "description": {"type": "string", "description": "Description"},
                    "price": {"type": "number", "description": "Unit price"},
                    "qty": {"type": "integer", "description": "Quantity on hand"},
                    "category": {
                        "type": "string",
                        "enum": ["Electronics", "Groceries", "Clothing"],
                        "description": "Item category",
                    },
                },
            },
        ),
        Tool(
            name="storefront_attach_item_image",
            description="Attach an image file from the local filesystem to the new stock item",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Path to the image file"},
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="storefront_submit_item",
            description="Submit the new stock item form to the item service",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_get_checkout",
            description="Show cart contents, total amount and payment form state",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="storefront_set_payment_method",
            description="Choose card payment or cash on delivery",
            inputSchema={
                "type": "object",
                "properties": {
                    "method": {
                        "type": "string",
                        "enum": ["Card", "COD"],
                        "description": "Card or COD (cash on delivery)",
                    },
                },
                "required": ["method"],
            },
        ),
        Tool(
            name="storefront_update_card_details",
            description="Fill in card fields for card payments",
            inputSchema={
                "type": "object",
                "properties": {
                    "cardholderName": {"type": "string", "description": "Name on card"},
                    "cardNumber": {"type": "string", "description": "Card number"},
                    "expiryDate": {"type": "string", "description": "MM/YY"},
                    "cvv": {"type": "string", "description": "CVV"},
                },
            },
        ),
        Tool(
            name="storefront_submit_payment",
            description="Pay for the cart with the selected payment method",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "storefront_list_items":
            if arguments.get("refresh"):
                if not await inventory.load_catalog():
                    return [
                        TextContent(
                            type="text",
                            text=f"❌ Could not refresh the catalog, showing last known items.\n\n"
                                 f"{render_catalog(inventory, settings.BASE_URL)}",
                        )
                    ]
            return [TextContent(type="text", text=render_catalog(inventory, settings.BASE_URL))]

        elif name == "storefront_update_item_draft":
            updated = []
            for field in ("name", "description", "price", "qty", "category"):
                if field in arguments:
                    inventory.update_draft_field(field, arguments[field])
                    updated.append(field)
            if not updated:
                return [TextContent(type="text", text="Error: No item fields provided")]
            return [TextContent(type="text", text=f"✅ Updated draft fields: {', '.join(updated)}")]

        elif name == "storefront_attach_item_image":
            path = arguments.get("path")
            if not path:
                return [TextContent(type="text", text="Error: path parameter required")]
            inventory.attach_image(path)
            return [TextContent(type="text", text=f"✅ Attached image {inventory.draft.image.filename}")]

        elif name == "storefront_submit_item":
            item = await inventory.submit_draft()
            if item is not None:
                return [
                    TextContent(
                        type="text",
                        text=f"✅ Added {item.name} to the catalog\n"
                             f"Total Stock Items: {inventory.total_item_count}\n"
                             f"Total Value: ${inventory.total_value}",
                    )
                ]
            if isinstance(inventory.last_error, ValidationError):
                return [TextContent(type="text", text=f"❌ {inventory.notice.message}")]
            return [
                TextContent(
                    type="text",
                    text="❌ Failed to add stock item. Your draft was kept, try submitting again.",
                )
            ]

        elif name == "storefront_get_checkout":
            return [TextContent(type="text", text=render_checkout(checkout))]

        elif name == "storefront_set_payment_method":
            checkout.set_payment_method(arguments["method"])
            return [
                TextContent(
                    type="text",
                    text=f"✅ Payment method set to {checkout.payment_method.value}",
                )
            ]

        elif name == "storefront_update_card_details":
            updated = []
            for field in ("cardholderName", "cardNumber", "expiryDate", "cvv"):
                if field in arguments:
                    checkout.update_card_field(field, str(arguments[field]))
                    updated.append(field)
            if not updated:
                return [TextContent(type="text", text="Error: No card fields provided")]
            return [TextContent(type="text", text=f"✅ Updated card fields: {', '.join(updated)}")]

        elif name == "storefront_submit_payment":
            success = await checkout.submit_payment()
            if success:
                return [
                    TextContent(
                        type="text",
                        text=f"✅ {checkout.notice.message} Paid ${checkout.total_amount}",
                    )
                ]
            message = checkout.submission.message or "Payment is already being processed."
            return [TextContent(type="text", text=f"❌ {message}")]

        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return [
            TextContent(
                type="text",
                text=f"Error: {str(e)}",
            )
        ]


async def main() -> None:
    """Main entry point."""
    global inventory, checkout, client

    store = JsonFileStore(settings.STORAGE_FILE)
    auth_manager = AuthManager(store, env_token=settings.TOKEN)
    client = StorefrontClient(settings.BASE_URL, timeout=settings.TIMEOUT)

    inventory = InventoryController(client)
    checkout = CheckoutController(client, store, auth_manager)

    if not auth_manager.is_authenticated():
        logger.warning("No bearer token found (STOREFRONT_TOKEN or stored token)")
        logger.warning("Payments will be sent without an Authorization header")

    logger.info(f"Starting Storefront MCP Server against {settings.BASE_URL}...")
    await inventory.load_catalog()
    checkout.load_cart()

    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
