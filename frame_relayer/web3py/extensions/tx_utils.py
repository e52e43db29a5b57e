import logging
from typing import Optional

from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3.contract.contract import ContractFunction
from web3.exceptions import ContractLogicError, TimeExhausted
from web3.module import Module
from web3.types import TxParams, TxReceipt, Wei

from frame_relayer import constants, variables
from frame_relayer.metrics.prometheus.basic import TRANSACTIONS_COUNT, Status
from frame_relayer.utils.input import prompt

logger = logging.getLogger(__name__)


class TransactionUtils(Module):
    """
    Sends a contract call as an EIP-1559 transaction.
    The call is simulated first, reverted calls are never sent.
    """

    def check_and_send_transaction(
        self,
        transaction: ContractFunction,
        account: Optional[LocalAccount] = None,
    ) -> Optional[TxReceipt]:
        if not account:
            logger.info({'msg': 'No account provided to submit the request. Dry mode'})
            return None

        params = self._get_transaction_params(transaction, account)

        if not self._check_transaction(transaction, params):
            return None

        if variables.DAEMON:
            return self._sign_and_send_transaction(transaction, params, account)

        return self._manual_tx_processing(transaction, params, account)

    def _manual_tx_processing(
        self,
        transaction: ContractFunction,
        params: TxParams,
        account: LocalAccount,
    ) -> Optional[TxReceipt]:
        logger.warning({'msg': 'Send transaction in manual mode.'})
        msg = (
            '\n'
            f'Going to call `{transaction.fn_name}` on {transaction.address}\n'
            f'Tx args:\n{transaction.args}\n'
            f'Tx params:\n{params}\n'
        )
        if prompt(f'{msg}Should we send this TX? [y/n]: '):
            return self._sign_and_send_transaction(transaction, params, account)

        logger.info({'msg': 'Transaction is declined by operator.'})
        return None

    @staticmethod
    def _check_transaction(transaction: ContractFunction, params: TxParams) -> bool:
        """Static call with the same params. False if the call reverts."""
        logger.info({'msg': 'Check transaction. Make static call.', 'value': transaction.args})

        try:
            result = transaction.call(params)
        except (ValueError, ContractLogicError) as error:
            logger.error({'msg': 'Transaction reverted.', 'error': str(error)})
            return False

        logger.info({'msg': 'Transaction executed successfully.', 'value': result})
        return True

    def _get_priority_fee(self) -> Wei:
        """Percentile of the last block rewards, clamped to [MIN_PRIORITY_FEE, MAX_PRIORITY_FEE]"""
        reward = self.w3.eth.fee_history(1, 'latest', [variables.PRIORITY_FEE_PERCENTILE])['reward'][0][0]
        return Wei(min(variables.MAX_PRIORITY_FEE, max(reward, variables.MIN_PRIORITY_FEE)))

    def _get_transaction_params(self, transaction: ContractFunction, account: LocalAccount) -> TxParams:
        base_fee = self.w3.eth.get_block('latest')['baseFeePerGas']
        priority_fee = self._get_priority_fee()

        params: TxParams = {
            'from': account.address,
            # Survives base fee growth for a few blocks
            'maxFeePerGas': Wei(base_fee * 2 + priority_fee),
            'maxPriorityFeePerGas': priority_fee,
            'nonce': self.w3.eth.get_transaction_count(account.address),
        }

        if gas := self._estimate_gas(transaction, account):
            params['gas'] = gas

        return params

    @staticmethod
    def _estimate_gas(transaction: ContractFunction, account: LocalAccount) -> Optional[int]:
        """None if estimation reverts. Node will estimate gas on send then"""
        try:
            gas = transaction.estimate_gas({'from': account.address})
        except ContractLogicError as error:
            logger.warning({'msg': 'Can not estimate gas. Contract logic error.', 'error': str(error)})
            return None
        except ValueError as error:
            logger.warning({'msg': 'Can not estimate gas. Execution reverted.', 'error': str(error)})
            return None

        return min(constants.MAX_BLOCK_GAS_LIMIT, gas + variables.TX_GAS_ADDITION)

    def _sign_and_send_transaction(
        self,
        transaction: ContractFunction,
        params: TxParams,
        account: LocalAccount,
    ) -> Optional[TxReceipt]:
        signed_tx = self.w3.eth.account.sign_transaction(transaction.build_transaction(params), account.key)

        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        logger.info({'msg': 'Transaction sent.', 'value': tx_hash.hex()})

        return self._handle_sent_transaction(tx_hash)

    def _handle_sent_transaction(self, tx_hash: HexBytes) -> Optional[TxReceipt]:
        try:
            tx_receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except TimeExhausted:
            TRANSACTIONS_COUNT.labels(status=Status.FAILURE.value).inc()
            logger.warning({'msg': 'Transaction was not found in blockchain after 120 seconds.'})
            return None

        status = Status.SUCCESS if tx_receipt['status'] == 1 else Status.FAILURE
        TRANSACTIONS_COUNT.labels(status=status.value).inc()

        logger.info({
            'msg': 'Transaction is in blockchain.',
            'status': status.value,
            'blockHash': tx_receipt['blockHash'],
            'blockNumber': tx_receipt['blockNumber'],
            'gasUsed': tx_receipt['gasUsed'],
            'effectiveGasPrice': tx_receipt['effectiveGasPrice'],
            'transactionHash': tx_receipt['transactionHash'],
            'transactionIndex': tx_receipt['transactionIndex'],
        })

        return tx_receipt
