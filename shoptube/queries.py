"""GraphQL documents sent to the hosted data layer.

Every operation carries a unique name; tests dispatch on it.
"""

# Users

GET_USER_BY_EMAIL = """
query GetUserByEmail($email: String!) {
  users(where: {email: {_eq: $email}}) {
    id
    name
    email
    role
    password_hash
    created_at
  }
}
"""

GET_USER_BY_ID = """
query GetUserById($userId: uuid!) {
  users_by_pk(id: $userId) {
    id
    name
    email
    role
    created_at
  }
}
"""

GET_USER_PASSWORD_HASH = """
query GetUserPasswordHash($userId: uuid!) {
  users_by_pk(id: $userId) {
    id
    password_hash
  }
}
"""

GET_USERS_BY_IDS = """
query GetUsersByIds($ids: [uuid!]!) {
  users(where: {id: {_in: $ids}}) {
    id
    name
    email
    created_at
  }
}
"""

CREATE_USER = """
mutation CreateUser($name: String!, $email: String!, $password_hash: String!, $role: String!) {
  insert_users_one(object: {name: $name, email: $email, password_hash: $password_hash, role: $role}) {
    id
    name
    email
    role
  }
}
"""

UPDATE_USER_PROFILE = """
mutation UpdateUserProfile($userId: uuid!, $name: String!, $email: String!) {
  update_users_by_pk(pk_columns: {id: $userId}, _set: {name: $name, email: $email}) {
    id
    name
    email
  }
}
"""

UPDATE_PASSWORD = """
mutation UpdatePassword($userId: uuid!, $passwordHash: String!) {
  update_users_by_pk(pk_columns: {id: $userId}, _set: {password_hash: $passwordHash}) {
    id
  }
}
"""

# Seller profiles

GET_SELLER_PROFILE = """
query GetSellerProfile($userId: uuid!) {
  seller_profiles(where: {user_id: {_eq: $userId}}) {
    id
    business_name
    description
    is_approved
    created_at
  }
}
"""

CREATE_SELLER_PROFILE = """
mutation CreateSellerProfile($userId: uuid!, $businessName: String!, $description: String) {
  insert_seller_profiles_one(object: {
    user_id: $userId, business_name: $businessName, description: $description, is_approved: false
  }) {
    id
    business_name
  }
}
"""

UPDATE_SELLER_PROFILE = """
mutation UpdateSellerProfile($userId: uuid!, $businessName: String!, $description: String) {
  update_seller_profiles(
    where: {user_id: {_eq: $userId}},
    _set: {business_name: $businessName, description: $description}
  ) {
    affected_rows
  }
}
"""

APPROVE_SELLER = """
mutation ApproveSeller($profileId: uuid!) {
  update_seller_profiles_by_pk(pk_columns: {id: $profileId}, _set: {is_approved: true}) {
    id
    user_id
    business_name
    description
    is_approved
  }
}
"""

GET_PENDING_SELLERS = """
query GetPendingSellers {
  seller_profiles(where: {is_approved: {_eq: false}}, order_by: {created_at: desc}) {
    id
    business_name
    description
    user_id
    created_at
    user {
      name
      email
    }
  }
}
"""

GET_SELLER_SUMMARIES = """
query GetSellerSummaries($ids: [uuid!]!) {
  users(where: {id: {_in: $ids}}) {
    id
    name
  }
  seller_profiles(where: {user_id: {_in: $ids}}) {
    id
    user_id
    business_name
    description
    is_approved
  }
}
"""

GET_SELLER_WITH_PRODUCTS = """
query GetSellerWithProducts($sellerId: uuid!) {
  users_by_pk(id: $sellerId) {
    id
    name
  }
  seller_profiles(where: {user_id: {_eq: $sellerId}}) {
    id
    business_name
    description
    is_approved
  }
  products(where: {seller_id: {_eq: $sellerId}}, order_by: {created_at: desc}) {
    id
    name
    description
    price
    stock
    image_url
    created_at
  }
}
"""

# Products

GET_PRODUCTS = """
query GetProducts {
  products(order_by: {created_at: desc}) {
    id
    name
    description
    price
    stock
    image_url
    seller_id
    created_at
  }
}
"""

GET_PRODUCT_BY_ID = """
query GetProductById($productId: uuid!) {
  products_by_pk(id: $productId) {
    id
    name
    description
    price
    stock
    image_url
    created_at
    seller_id
  }
}
"""

GET_PRODUCTS_BY_IDS = """
query GetProductsByIds($ids: [uuid!]!) {
  products(where: {id: {_in: $ids}}) {
    id
    name
    description
    price
    stock
    image_url
    seller_id
    created_at
  }
}
"""

GET_SELLER_PRODUCTS = """
query GetSellerProducts($sellerId: uuid!) {
  products(where: {seller_id: {_eq: $sellerId}}, order_by: {created_at: desc}) {
    id
    name
    description
    price
    stock
    image_url
    created_at
  }
}
"""

CREATE_PRODUCT = """
mutation CreateProduct(
  $name: String!, $description: String!, $price: numeric!, $stock: Int!, $sellerId: uuid!, $imageUrl: String
) {
  insert_products_one(object: {
    name: $name, description: $description, price: $price, stock: $stock,
    seller_id: $sellerId, image_url: $imageUrl
  }) {
    id
    name
    description
    price
    stock
    seller_id
    image_url
    created_at
  }
}
"""

GET_MARKETPLACE_PRODUCTS = """
query GetMarketplaceProducts($limit: Int!, $offset: Int!, $search: String!) {
  products(
    where: {_or: [{name: {_ilike: $search}}, {description: {_ilike: $search}}]}
    limit: $limit
    offset: $offset
    order_by: {created_at: desc}
  ) {
    id
    name
    description
    price
    stock
    image_url
    created_at
    seller_id
  }
}
"""

# Cart

GET_USER_CART = """
query GetUserCart($userId: uuid!) {
  cart_items(where: {customer_id: {_eq: $userId}}) {
    id
    quantity
    product {
      id
      name
      price
      stock
      image_url
    }
  }
}
"""

ADD_TO_CART = """
mutation AddToCart($userId: uuid!, $productId: uuid!, $quantity: Int!) {
  insert_cart_items_one(object: {customer_id: $userId, product_id: $productId, quantity: $quantity}) {
    id
  }
}
"""

UPDATE_CART_ITEM = """
mutation UpdateCartItem($cartItemId: uuid!, $userId: uuid!, $quantity: Int!) {
  update_cart_items(
    where: {id: {_eq: $cartItemId}, customer_id: {_eq: $userId}},
    _set: {quantity: $quantity}
  ) {
    affected_rows
  }
}
"""

REMOVE_FROM_CART = """
mutation RemoveFromCart($cartItemId: uuid!, $userId: uuid!) {
  delete_cart_items(where: {id: {_eq: $cartItemId}, customer_id: {_eq: $userId}}) {
    affected_rows
  }
}
"""

CLEAR_CART = """
mutation ClearCart($userId: uuid!) {
  delete_cart_items(where: {customer_id: {_eq: $userId}}) {
    affected_rows
  }
}
"""

# Wishlist

GET_USER_WISHLIST = """
query GetUserWishlist($userId: uuid!) {
  wishlist_items(where: {customer_id: {_eq: $userId}}, order_by: {created_at: desc}) {
    id
    product_id
    created_at
  }
}
"""

ADD_TO_WISHLIST = """
mutation AddToWishlist($userId: uuid!, $productId: uuid!) {
  insert_wishlist_items_one(object: {customer_id: $userId, product_id: $productId}) {
    id
    product_id
    created_at
  }
}
"""

REMOVE_FROM_WISHLIST = """
mutation RemoveFromWishlist($wishlistItemId: uuid!, $userId: uuid!) {
  delete_wishlist_items(where: {id: {_eq: $wishlistItemId}, customer_id: {_eq: $userId}}) {
    affected_rows
  }
}
"""

# Subscriptions

GET_CUSTOMER_SUBSCRIPTIONS = """
query GetCustomerSubscriptions($customerId: uuid!) {
  subscriptions(where: {customer_id: {_eq: $customerId}}, order_by: {created_at: desc}) {
    id
    created_at
    seller_id
  }
}
"""

CHECK_USER_SUBSCRIBED = """
query CheckUserSubscribed($userId: uuid!, $sellerId: uuid!) {
  subscriptions(where: {customer_id: {_eq: $userId}, seller_id: {_eq: $sellerId}}) {
    id
    customer_id
    seller_id
    created_at
  }
}
"""

SUBSCRIBE_TO_SELLER = """
mutation SubscribeToSeller($customerId: uuid!, $sellerId: uuid!) {
  insert_subscriptions_one(object: {customer_id: $customerId, seller_id: $sellerId}) {
    id
    customer_id
    seller_id
    created_at
  }
}
"""

UNSUBSCRIBE_FROM_SELLER = """
mutation UnsubscribeFromSeller($customerId: uuid!, $sellerId: uuid!) {
  delete_subscriptions(where: {customer_id: {_eq: $customerId}, seller_id: {_eq: $sellerId}}) {
    affected_rows
  }
}
"""

GET_SELLER_SUBSCRIBERS = """
query GetSellerSubscribers($sellerId: uuid!) {
  subscriptions(where: {seller_id: {_eq: $sellerId}}, order_by: {created_at: desc}) {
    id
    created_at
    customer_id
  }
}
"""

# Orders

CREATE_ORDER = """
mutation CreateOrder(
  $userId: uuid!, $totalAmount: numeric!, $status: String!, $shippingAddress: String!,
  $txRef: String!, $orderItems: [order_items_insert_input!]!
) {
  insert_orders_one(object: {
    customer_id: $userId, total_amount: $totalAmount, status: $status,
    shipping_address: $shippingAddress, tx_ref: $txRef, order_items: {data: $orderItems}
  }) {
    id
    status
    tx_ref
  }
}
"""

GET_ORDER_BY_TX_REF = """
query GetOrderByTxRef($txRef: String!) {
  orders(where: {tx_ref: {_eq: $txRef}}) {
    id
    customer_id
    total_amount
    status
    tx_ref
  }
}
"""

UPDATE_ORDER_STATUS_BY_TX_REF = """
mutation UpdateOrderStatusByTxRef($txRef: String!, $fromStatus: String!, $status: String!) {
  update_orders(
    where: {tx_ref: {_eq: $txRef}, status: {_eq: $fromStatus}},
    _set: {status: $status}
  ) {
    affected_rows
    returning {
      id
      status
    }
  }
}
"""

GET_ORDER_BY_ID = """
query GetOrderById($orderId: uuid!, $userId: uuid!) {
  orders(where: {id: {_eq: $orderId}, customer_id: {_eq: $userId}}) {
    id
    total_amount
    status
    shipping_address
    tx_ref
    created_at
    order_items {
      id
      quantity
      price_per_unit
      product {
        id
        name
        image_url
      }
    }
  }
}
"""

GET_USER_ORDERS = """
query GetUserOrders($userId: uuid!) {
  orders(where: {customer_id: {_eq: $userId}}, order_by: {created_at: desc}) {
    id
    total_amount
    status
    created_at
    order_items {
      id
      quantity
      price_per_unit
      product {
        id
        name
        image_url
        seller_id
      }
    }
  }
}
"""

GET_SELLER_ORDERS = """
query GetSellerOrders($sellerId: uuid!) {
  orders(
    where: {order_items: {product: {seller_id: {_eq: $sellerId}}}}
    order_by: {created_at: desc}
  ) {
    id
    total_amount
    status
    created_at
    order_items {
      id
      quantity
      price_per_unit
      product {
        id
        name
        image_url
      }
    }
  }
}
"""

GET_SELLER_ORDER = """
query GetSellerOrder($orderId: uuid!, $sellerId: uuid!) {
  orders(where: {id: {_eq: $orderId}, order_items: {product: {seller_id: {_eq: $sellerId}}}}) {
    id
    status
  }
}
"""

UPDATE_ORDER_STATUS_BY_ID = """
mutation UpdateOrderStatusById($orderId: uuid!, $fromStatus: String!, $status: String!) {
  update_orders(
    where: {id: {_eq: $orderId}, status: {_eq: $fromStatus}},
    _set: {status: $status}
  ) {
    affected_rows
  }
}
"""

# Dashboards

GET_ADMIN_DASHBOARD_STATS = """
query GetAdminDashboardStats {
  users_aggregate {
    aggregate {
      count
    }
  }
  seller_profiles_aggregate(where: {is_approved: {_eq: true}}) {
    aggregate {
      count
    }
  }
  products_aggregate {
    aggregate {
      count
    }
  }
  orders_aggregate(where: {status: {_nin: ["payment_pending", "failed"]}}) {
    aggregate {
      sum {
        total_amount
      }
    }
  }
}
"""

GET_RECENT_USERS = """
query GetRecentUsers($limit: Int!) {
  users(order_by: {created_at: desc}, limit: $limit) {
    id
    name
    email
    role
    created_at
  }
}
"""

GET_RECENT_PRODUCTS = """
query GetRecentProducts($limit: Int!) {
  products(order_by: {created_at: desc}, limit: $limit) {
    id
    name
    price
    stock
    created_at
    seller_id
  }
}
"""

GET_CUSTOMERS = """
query GetCustomers {
  users(where: {role: {_eq: "customer"}}, order_by: {created_at: desc}) {
    id
    name
    email
    created_at
    subscriptions_aggregate {
      aggregate {
        count
      }
    }
    orders_aggregate {
      aggregate {
        count
        sum {
          total_amount
        }
      }
    }
  }
}
"""

GET_SELLER_DASHBOARD_STATS = """
query GetSellerDashboardStats($sellerId: uuid!) {
  orders_aggregate(where: {order_items: {product: {seller_id: {_eq: $sellerId}}}}) {
    aggregate {
      sum {
        total_amount
      }
    }
  }
  products_aggregate(where: {seller_id: {_eq: $sellerId}}) {
    aggregate {
      count
    }
  }
  subscriptions_aggregate(where: {seller_id: {_eq: $sellerId}}) {
    aggregate {
      count
    }
  }
  orders(
    where: {order_items: {product: {seller_id: {_eq: $sellerId}}}}
    order_by: {created_at: desc}
    limit: 5
  ) {
    id
    total_amount
    status
    created_at
    order_items_aggregate {
      aggregate {
        count
      }
    }
  }
}
"""

GET_CUSTOMER_DASHBOARD_STATS = """
query GetCustomerDashboardStats($customerId: uuid!) {
  subscriptions_aggregate(where: {customer_id: {_eq: $customerId}}) {
    aggregate {
      count
    }
  }
  orders_aggregate(where: {customer_id: {_eq: $customerId}}) {
    aggregate {
      count
    }
  }
  subscriptions(where: {customer_id: {_eq: $customerId}}, order_by: {created_at: desc}, limit: 3) {
    id
    created_at
    seller_id
  }
}
"""

# Notifications

GET_USER_NOTIFICATIONS = """
query GetUserNotifications($userId: uuid!, $limit: Int!, $offset: Int!) {
  notifications(
    where: {user_id: {_eq: $userId}}
    order_by: {created_at: desc}
    limit: $limit
    offset: $offset
  ) {
    id
    title
    message
    type
    is_read
    created_at
    product_id
    seller_id
  }
}
"""

GET_UNREAD_NOTIFICATIONS_COUNT = """
query GetUnreadNotificationsCount($userId: uuid!) {
  notifications_aggregate(where: {user_id: {_eq: $userId}, is_read: {_eq: false}}) {
    aggregate {
      count
    }
  }
}
"""

MARK_NOTIFICATION_AS_READ = """
mutation MarkNotificationAsRead($notificationId: uuid!, $userId: uuid!) {
  update_notifications(
    where: {id: {_eq: $notificationId}, user_id: {_eq: $userId}},
    _set: {is_read: true}
  ) {
    affected_rows
  }
}
"""

MARK_ALL_NOTIFICATIONS_AS_READ = """
mutation MarkAllNotificationsAsRead($userId: uuid!) {
  update_notifications(where: {user_id: {_eq: $userId}, is_read: {_eq: false}}, _set: {is_read: true}) {
    affected_rows
  }
}
"""
