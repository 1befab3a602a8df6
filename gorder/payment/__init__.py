"""Payment service: payment-link creation and the order-created consumer."""