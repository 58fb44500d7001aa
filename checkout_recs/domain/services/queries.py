# GraphQL documents sent to the Storefront API.

PRODUCT_FIELDS = """
  id
  title
  images(first: 1) {
    nodes {
      url
    }
  }
  variants(first: 1) {
    nodes {
      id
      availableForSale
      price {
        amount
        currencyCode
      }
    }
  }
"""

RECOMMENDATION_METAFIELD_QUERY = """
query getRecommendationMetafield($id: ID!, $namespace: String!, $key: String!) {
  product(id: $id) {
    metafield(namespace: $namespace, key: $key) {
      value
    }
  }
}
"""

PRODUCTS_BY_IDS_QUERY = (
    """
query getProductsByIds($ids: [ID!]!) {
  nodes(ids: $ids) {
    __typename
    ... on Product {"""
    + PRODUCT_FIELDS
    + """    }
  }
}
"""
)

# Deprecated catalog source: first page of the catalog, no scoping to the trigger product.
CATALOG_PAGE_QUERY = (
    """
query getCatalogPage($first: Int!) {
  products(first: $first) {
    nodes {"""
    + PRODUCT_FIELDS
    + """    }
  }
}
"""
)

CART_LINES_ADD_MUTATION = """
mutation cartLinesAdd($cartId: ID!, $lines: [CartLineInput!]!) {
  cartLinesAdd(cartId: $cartId, lines: $lines) {
    cart {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""
