"""
Azure Storage Queue utilities
"""
from azure.storage.queue import QueueClient, TextBase64EncodePolicy
from azure.core.exceptions import ResourceExistsError
import logging

def get_queue_client(conn_str: str, queue_name: str) -> QueueClient:
    """
    Get or create a queue client for the specified queue.

    Messages are base64 encoded, which is what queue-triggered functions
    expect by default.

    Args:
        conn_str (str): Storage account connection string
        queue_name (str): Name of the queue

    Returns:
        QueueClient: Azure Storage Queue client
    """
    queue_client = QueueClient.from_connection_string(
        conn_str=conn_str,
        queue_name=queue_name,
        message_encode_policy=TextBase64EncodePolicy(),
    )

    try:
        queue_client.create_queue()
        logging.info(f"Created queue: {queue_name}")
    except ResourceExistsError:
        pass
    except Exception as e:
        logging.error(f"Error creating queue {queue_name}: {str(e)}")
        raise

    return queue_client
