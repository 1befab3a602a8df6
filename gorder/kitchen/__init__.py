"""Kitchen service: the consumer that cooks paid orders and marks them ready."""