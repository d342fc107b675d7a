"""Messaging interface (port) for delivering notifications."""
from abc import ABC, abstractmethod


class INotifier(ABC):
    """Abstract interface for posting a message to a chat channel."""
    
    @abstractmethod
    async def post(self, message: str, channel: str, display_name: str, icon: str) -> bool:
        """Post a message.
        
        Args:
            message: Formatted message text
            channel: Destination channel, or @user for a direct message
            display_name: Name the message is posted under
            icon: Emoji code used as the poster's icon
            
        Returns:
            True when the message was accepted
        """
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
