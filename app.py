"""
Inkquote v0.1 - Custom Apparel Quote Configurator
Streamlit web application for instant decoration quotes.
"""
import os
import uuid

import streamlit as st

from inkquote.db import connect, ensure_schema, insert_quote
from inkquote.delivery_dates import get_delivery_date
from inkquote.distance import COUNTRIES, NominatimDistanceProvider
from inkquote.domain import (
    Address,
    Delay,
    Delivery,
    DeliveryMode,
    DtfSelection,
    EmbroiderySelection,
    ProductLine,
    QuoteItem,
    ScreenPrintSelection,
    Technique,
)
from inkquote.file_handler import (
    FileSizeError,
    InvalidExtensionError,
    RASTER_EXTENSIONS,
    VECTOR_EXTENSIONS,
    requires_vectorization,
    save_upload,
    validate_extension,
    validate_size,
)
from inkquote.pipeline import process_quote
from inkquote.providers import get_snapshot_provider
from inkquote.service_pricing import TECHNIQUE_NAMES
from inkquote.settings import get_settings
from inkquote.pdf_generator import generate_quote_pdf
from inkquote.contact import build_mailto_link, needs_review


DELAY_OPTIONS = {
    "Standard - 10 working days": Delay(working_days=10),
    "Express - 7 working days": Delay(working_days=10, is_express=True, express_days=7),
    "Express - 5 working days": Delay(working_days=10, is_express=True, express_days=5),
    "Express - 3 working days": Delay(working_days=10, is_express=True, express_days=3),
    "Express - 24 hours": Delay(working_days=10, is_express=True, express_days=0.5),
}

DELIVERY_LABELS = {
    DeliveryMode.PICKUP: "Pickup at the workshop (free)",
    DeliveryMode.PARCEL: "Parcel delivery (per carton)",
    DeliveryMode.COURIER: "Courier (per km)",
    DeliveryMode.CLIENT_CARRIER: "Own carrier (free)",
}


# Page configuration
st.set_page_config(
    page_title="Inkquote v0.1",
    page_icon="👕",
    layout="wide",
)

settings = get_settings()
snapshot = get_snapshot_provider().get()

# Header
st.title("Inkquote v0.1 - Custom Apparel Quote")
st.markdown("""
**Screen printing · Embroidery · DTF transfers**
Nivelles, Belgium
""")

st.divider()

# Garment section
st.header("Garment")
col_product, col_quantity = st.columns(2)
with col_product:
    product_name = st.text_input("Product", value="Organic T-shirt")
    category = st.selectbox("Category", ["tshirt", "polo", "sweat", "totebag"])
with col_quantity:
    quantity = st.number_input("Quantity", min_value=1, max_value=10000, value=50, step=1)
    client_provided = st.checkbox("I provide the garments")
    unit_price = None
    if not client_provided:
        unit_price = st.number_input(
            "Garment unit price (€, before discount)",
            min_value=0.0,
            value=0.0,
            step=0.5,
            help="Leave at 0 if the price will come from our catalogue",
        ) or None

# Technique section
st.header("Decoration")
technique = st.radio(
    "Technique",
    list(Technique),
    format_func=lambda t: TECHNIQUE_NAMES[t],
    horizontal=True,
)
table = snapshot.tables.get(technique)

options = None
if technique is Technique.SCREEN_PRINT:
    color_counts = list(table.color_counts) if table else [1]
    color_count = st.selectbox("Number of colors", color_counts)
    tone = st.radio("Textile tone", ["light", "dark"], horizontal=True)
    available_options = list(table.options) if table else []
    selected = st.multiselect(
        "Options",
        available_options,
        format_func=lambda o: f"{o.name} (+{o.surcharge_percentage:g}%)",
    )
    options = ScreenPrintSelection(
        color_count=color_count,
        tone=tone,
        selected_option_ids=tuple(o.id for o in selected),
    )
elif technique is Technique.EMBROIDERY:
    size = st.radio(
        "Design size",
        ["small", "large"],
        format_func=lambda s: "Small (max 10x10 cm)" if s == "small" else "Large (max 20x25 cm)",
        horizontal=True,
    )
    stitch_count = st.number_input("Stitch count", min_value=0, max_value=100000, value=5000, step=500)
    options = EmbroiderySelection(stitch_count=int(stitch_count), size=size)
else:
    dimensions = list(table.dimensions) if table else []
    dimension = st.selectbox("Print dimension", dimensions)
    options = DtfSelection(dimension=dimension)

# Artwork upload
uploaded_file = st.file_uploader(
    f"Upload artwork (Max {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB)",
    type=VECTOR_EXTENSIONS + RASTER_EXTENSIONS,
    help="Vector files (AI, EPS, SVG, PDF) can be used as-is; other formats are redrawn by our designer",
)

artwork_files = ()
vectorize = False
if uploaded_file is not None:
    try:
        validate_extension(uploaded_file.name)
        data = uploaded_file.getvalue()
        validate_size(len(data), settings.MAX_UPLOAD_SIZE)
        file_id, stored_path = save_upload(data, uploaded_file.name, settings.UPLOADS_PATH)
        artwork_files = (stored_path,)
        if requires_vectorization(uploaded_file.name):
            vectorize = st.checkbox(
                "Have our designer vectorize this artwork",
                value=True,
                help=f"€{snapshot.config.vectorization_price:.2f} per artwork",
            )
        st.success(f"✓ Artwork uploaded ({file_id})")
    except (InvalidExtensionError, FileSizeError) as e:
        st.error(f"⚠️ {str(e)}")

# Lead time and delivery
st.header("Lead Time & Delivery")
col_delay, col_delivery = st.columns(2)
with col_delay:
    delay_label = st.selectbox("Lead time", list(DELAY_OPTIONS))
    delay = DELAY_OPTIONS[delay_label]
    st.caption(f"Expected delivery: {get_delivery_date(delay).isoformat()}")
    if delay.is_express:
        st.info("Express lead times must be approved by the workshop.")

with col_delivery:
    mode = st.selectbox("Delivery", list(DeliveryMode), format_func=lambda m: DELIVERY_LABELS[m])
    address = None
    if mode is DeliveryMode.COURIER:
        street = st.text_input("Street")
        city = st.text_input("City")
        postal_code = st.text_input("Postal code")
        country = st.selectbox("Country", list(COUNTRIES), format_func=lambda c: COUNTRIES[c])
        if street and city:
            address = Address(street=street, city=city, postal_code=postal_code, country=country)
    individual_packaging = st.checkbox(
        f"Individual packaging (€{snapshot.config.individual_packaging_price:.2f}/piece)"
    )
    new_carton = st.checkbox(f"New cartons (€{snapshot.config.new_carton_price:.2f}/carton)")

delivery = Delivery(
    mode=mode,
    address=address,
    individual_packaging=individual_packaging,
    new_carton=new_carton,
)

st.divider()

if st.button("Calculate quote", type="primary"):
    item = QuoteItem(
        id=str(uuid.uuid4()),
        product=ProductLine(
            name=product_name,
            quantity=int(quantity),
            category=category,
            unit_price=unit_price,
            client_provided=client_provided,
        ),
        technique=technique,
        options=options,
        total_quantity=int(quantity),
        artwork_files=artwork_files,
        vectorize=vectorize,
    )

    distance_provider = NominatimDistanceProvider() if mode is DeliveryMode.COURIER else None

    with st.spinner("Calculating price..."):
        result = process_quote([item], delivery, delay, distance_provider=distance_provider)

    # Keep a record of every calculated quote
    try:
        os.makedirs(os.path.dirname(settings.DATABASE_PATH) or ".", exist_ok=True)
        conn = connect(settings.DATABASE_PATH)
        ensure_schema(conn)
        insert_quote(conn, result)
        conn.close()
    except Exception as e:
        st.warning(f"Could not save quote: {str(e)}")

    if result.errors:
        st.error("⚠️ Processing reported the following errors:")
        for error in result.errors:
            st.error(f"• {error}")

    if result.total is None:
        st.stop()

    total = result.total

    st.header("Quote Results")
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("DECORATION")
        for detail in total.item_details:
            outcome = detail.outcome
            if outcome.available:
                st.markdown(f"""
**{detail.item.product.name}** - {TECHNIQUE_NAMES[outcome.technique]}
**Unit price:** €{outcome.unit_price:.2f} × {outcome.quantity}
**Fixed fees:** €{outcome.fixed_fees:.2f}
**Options:** €{outcome.options_surcharge:.2f}
**Express:** €{outcome.express_surcharge:.2f}
**Total:** €{outcome.total:.2f}
                """)
            else:
                st.warning(f"🟡 {outcome.message}")
                if outcome.min_quantity_required:
                    st.info(f"Order at least {outcome.min_quantity_required} pieces to get a price.")

    with col2:
        st.subheader("QUOTE SUMMARY")
        st.markdown(f"""
**Garments:** €{total.products_total:.2f}
**Decoration:** €{total.services_total:.2f}
**Shipping:** €{total.shipping_cost:.2f} ({total.cartons} carton(s))
**Packaging:** €{total.packaging_cost:.2f}
**New cartons:** €{total.carton_cost:.2f}
**Vectorization:** €{total.vectorization_cost:.2f}

**Grand total:** €{total.grand_total:.2f}
        """)
        if total.express_surcharge_total:
            st.info(f"**Note:** includes €{total.express_surcharge_total:.2f} express surcharge")

    if not total.is_complete:
        st.error("Some items could not be priced. The quote cannot be submitted as-is.")

    # Disclaimer
    st.divider()
    st.warning("""
**⚠️ IMPORTANT NOTICE**

Prices are in EUR and exclude VAT. Express lead times are subject to workshop approval.
    """)

    # Action buttons
    st.divider()
    col_pdf, col_contact = st.columns(2)

    with col_pdf:
        try:
            pdf_bytes = generate_quote_pdf(result)
            st.download_button(
                label="📄 Download PDF Quote",
                data=pdf_bytes,
                file_name=f"quote_{result.quote_id}.pdf",
                mime="application/pdf",
                use_container_width=True,
                disabled=not total.is_complete,
            )
        except Exception as e:
            st.error(f"Could not generate PDF: {str(e)}")

    with col_contact:
        if needs_review(result):
            try:
                mailto_url = build_mailto_link(result)
                st.link_button(
                    label="📧 Request Approval / Manual Review",
                    url=mailto_url,
                    use_container_width=True,
                )
            except Exception as e:
                st.error(f"Could not generate contact link: {str(e)}")

    st.caption(f"Quote ID: {result.quote_id}")

else:
    st.info("👆 Configure your order and click Calculate quote")

# Footer
st.divider()
st.caption("Inkquote v0.1")
