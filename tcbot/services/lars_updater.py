"""
Daily synchronisation of the stored hardware with the LARS GPU database.
"""

import logging

from tcbot.operations.hardware_splitter import HardwareSplitter
from tcbot.services.lars_client import LarsClient
from tcbot.services.user_lifecycle import UserLifecycleService

logger = logging.getLogger(__name__)


class LarsHardwareUpdater:
    """Creates, updates and deletes hardware so it matches LARS."""
    
    def __init__(self, database, lars_client: LarsClient, user_lifecycle: UserLifecycleService):
        self.db = database
        self.lars_client = lars_client
        self.user_lifecycle = user_lifecycle
    
    async def retrieve_hardware_and_persist(self):
        """
        Retrieve the LARS GPUs and apply them to the stored hardware.
        
        Each create, update or delete is applied on its own; a failing item is
        logged and the rest still go ahead. Hardware used by any user is never
        deleted.
        """
        logger.info("Retrieving hardware from LARS")
        lars_gpus = await self.lars_client.get_gpus()
        if not lars_gpus:
            logger.warning("No hardware retrieved from LARS, existing hardware left unchanged")
            return
        
        existing_hardware = await self.db.get_all_hardware()
        
        for hardware in HardwareSplitter.to_delete(lars_gpus, existing_hardware):
            try:
                if await self.db.is_hardware_in_use(hardware.id):
                    logger.warning(f"Hardware '{hardware.name}' (ID: {hardware.id}) no longer in LARS but still in use, not deleting")
                    continue
                await self.db.delete_hardware(hardware.id)
                logger.info(f"Deleted hardware '{hardware.name}' (ID: {hardware.id})")
            except Exception as e:
                logger.warning(f"Error deleting hardware '{hardware.name}' (ID: {hardware.id}): {e}")
        
        for lars_gpu, hardware in HardwareSplitter.to_update(lars_gpus, existing_hardware):
            try:
                await self.user_lifecycle.update_hardware(
                    hardware.id,
                    display_name=lars_gpu.display_name,
                    make=lars_gpu.make,
                    hardware_type=lars_gpu.hardware_type,
                    multiplier=lars_gpu.multiplier,
                    average_ppd=lars_gpu.average_ppd,
                )
                logger.info(f"Updated hardware '{hardware.name}' (ID: {hardware.id}): multiplier {hardware.multiplier} -> {lars_gpu.multiplier}")
            except Exception as e:
                logger.warning(f"Error updating hardware '{hardware.name}' (ID: {hardware.id}): {e}")
        
        for lars_gpu in HardwareSplitter.to_create(lars_gpus, existing_hardware):
            try:
                created = await self.db.create_hardware(
                    name=lars_gpu.name,
                    display_name=lars_gpu.display_name,
                    make=lars_gpu.make,
                    hardware_type=lars_gpu.hardware_type,
                    multiplier=lars_gpu.multiplier,
                    average_ppd=lars_gpu.average_ppd,
                )
                logger.debug(f"Created hardware '{created.name}' (ID: {created.id})")
            except Exception as e:
                logger.warning(f"Error creating hardware '{lars_gpu.name}': {e}")
        
        logger.info("Hardware update from LARS complete")
