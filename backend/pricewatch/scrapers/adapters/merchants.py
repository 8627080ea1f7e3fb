"""Selector configuration for every supported merchant.

Selectors within a field are ordered from the current layout to older
ones still served to some regions or A/B buckets.
"""

from typing import Dict

from pricewatch.scrapers.adapters.selector import SelectorAdapter
from pricewatch.scrapers.platform import MerchantId


AMAZON = SelectorAdapter(
    merchant=MerchantId.AMAZON,
    display_name="Amazon",
    name_selectors=("#productTitle", "h1 span#productTitle", "span.product-title-word-break"),
    price_selectors=(
        ".a-price-whole",
        ".a-price .a-offscreen",
        "#priceblock_ourprice",
        "#priceblock_dealprice",
    ),
    original_price_selectors=(".a-text-price .a-offscreen", "#priceblock_saleprice"),
    image_selectors=(
        ("#landingImage", "data-old-hires"),
        ("#landingImage", "src"),
        (".a-dynamic-image", "src"),
    ),
)

FLIPKART = SelectorAdapter(
    merchant=MerchantId.FLIPKART,
    display_name="Flipkart",
    name_selectors=(".B_NuCI", ".VU-ZEz", "h1"),
    price_selectors=("._30jeq3._16Jk6d", "._30jeq3", ".Nx9bqj.CxhGGd", ".Nx9bqj"),
    original_price_selectors=("._3I9_wc._2p6lqe", "._3I9_wc", ".yRaY8j"),
    image_selectors=(("._396cs4._2amPTt img", "src"), ("img._2r_T1I", "src"), ("img.DByuf4", "src")),
)

MYNTRA = SelectorAdapter(
    merchant=MerchantId.MYNTRA,
    display_name="Myntra",
    name_selectors=(".pdp-title", "h1.pdp-title", ".pdp-name"),
    price_selectors=(".pdp-price strong", ".pdp-price"),
    original_price_selectors=(".pdp-mrp s", ".pdp-mrp"),
    image_selectors=((".image-grid-image", "src"),),
)

AJIO = SelectorAdapter(
    merchant=MerchantId.AJIO,
    display_name="Ajio",
    name_selectors=("h1.prod-title", ".prod-name"),
    price_selectors=(".prod-sp",),
    original_price_selectors=(".prod-cp",),
    image_selectors=((".product-image img", "src"), (".rilrtl-lazy-img", "src")),
)

SNAPDEAL = SelectorAdapter(
    merchant=MerchantId.SNAPDEAL,
    display_name="Snapdeal",
    name_selectors=("h1.pdp-e-i-head",),
    price_selectors=(".payBlkBig", ".pdp-final-price"),
    original_price_selectors=(".pdpCutPrice",),
    image_selectors=((".cloudzoom", "src"), (".pdp-image-gallery-small", "src")),
)

TATACLIQ = SelectorAdapter(
    merchant=MerchantId.TATACLIQ,
    display_name="Tata CLiQ",
    name_selectors=(".ProductDescriptionPage__productName", "h1"),
    price_selectors=(".ProductDetailsMainCard__price",),
    original_price_selectors=(".ProductDetailsMainCard__cancelPrice",),
    image_selectors=((".ImageGallery__image img", "src"),),
)

NYKAA = SelectorAdapter(
    merchant=MerchantId.NYKAA,
    display_name="Nykaa",
    name_selectors=(".product-title", "h1"),
    price_selectors=(".css-1jczs19", ".post-card__content-price-offer"),
    image_selectors=((".css-12ydk9l img", "src"),),
)

MEESHO = SelectorAdapter(
    merchant=MerchantId.MEESHO,
    display_name="Meesho",
    name_selectors=("h1",),
    price_selectors=("h4",),
    image_selectors=(("img", "src"),),
)

JIOMART = SelectorAdapter(
    merchant=MerchantId.JIOMART,
    display_name="JioMart",
    name_selectors=("#pdp_product_name",),
    price_selectors=("#pdp_product_price", ".price-box .price"),
    image_selectors=((".large-image img", "src"),),
)

CROMA = SelectorAdapter(
    merchant=MerchantId.CROMA,
    display_name="Croma",
    name_selectors=("h1.pd-title",),
    price_selectors=(".new-price", "#pdp-product-price"),
    original_price_selectors=(".old-price .amount", "#old-price"),
    image_selectors=(("[id='0image']", "src"),),
)

RELIANCE_DIGITAL = SelectorAdapter(
    merchant=MerchantId.RELIANCE_DIGITAL,
    display_name="Reliance Digital",
    name_selectors=("h1.pdp__title",),
    price_selectors=(".pdp__offerPrice",),
    original_price_selectors=(".pdp__mrpPrice",),
    image_selectors=((".pdp__mainImg", "src"),),
)


MERCHANT_ADAPTERS: Dict[MerchantId, SelectorAdapter] = {
    adapter.merchant: adapter
    for adapter in (
        AMAZON,
        FLIPKART,
        MYNTRA,
        AJIO,
        SNAPDEAL,
        TATACLIQ,
        NYKAA,
        MEESHO,
        JIOMART,
        CROMA,
        RELIANCE_DIGITAL,
    )
}
