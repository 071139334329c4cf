# bookstore/services/notification_service.py
from bookstore.celery_worker import celery_app
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Customer notifications, processed asynchronously by Celery.
    Called after the transaction commits; a broker outage never undoes a
    committed order or payment.
    """

    @staticmethod
    def _enqueue(task, *args):
        try:
            task.delay(*args)
        except Exception as e:
            logger.error(f"Could not enqueue {task.name} {args}: {e}")

    def send_order_placed(self, user_id: int, order_id: int):
        self._enqueue(send_order_placed_task, user_id, order_id)

    def send_order_canceled(self, user_id: int, order_id: int):
        self._enqueue(send_order_canceled_task, user_id, order_id)

    def send_payment_confirmed(self, user_id: int, order_id: int, payment_id: int):
        self._enqueue(send_payment_confirmed_task, user_id, order_id, payment_id)


# a real deployment would hand these to an email / SMS / push provider
@celery_app.task(name="bookstore.services.notification_service.send_order_placed_task")
def send_order_placed_task(user_id: int, order_id: int):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} has been placed")
    return {"user_id": user_id, "order_id": order_id, "event": "order_placed", "status": "sent"}


@celery_app.task(name="bookstore.services.notification_service.send_order_canceled_task")
def send_order_canceled_task(user_id: int, order_id: int):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} has been canceled")
    return {"user_id": user_id, "order_id": order_id, "event": "order_canceled", "status": "sent"}


@celery_app.task(name="bookstore.services.notification_service.send_payment_confirmed_task")
def send_payment_confirmed_task(user_id: int, order_id: int, payment_id: int):
    logger.info(f"[NOTIFICATION] User {user_id}: payment {payment_id} for order {order_id} received")
    return {
        "user_id": user_id,
        "order_id": order_id,
        "payment_id": payment_id,
        "event": "payment_confirmed",
        "status": "sent",
    }
