# src/templates/fragments.py - v1
"""Static Solidity fragments keyed by organization, transaction and category.

Each fragment contributes state, constructor lines, functions and prose
notes used to ground provider prompts. A lookup miss yields EMPTY.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Fragment:
    """One composable piece of the fallback template."""

    notes: str = ""
    state: str = ""
    constructor: str = ""
    functions: str = ""
    risks: tuple[str, ...] = field(default_factory=tuple)


EMPTY = Fragment()


HEADER = """// SPDX-License-Identifier: MIT
pragma solidity ^{schema_version};

import "@openzeppelin/contracts/access/Ownable.sol";
import "@openzeppelin/contracts/utils/ReentrancyGuard.sol";
import "@openzeppelin/contracts/utils/Pausable.sol";
"""

BASE = Fragment(
    notes="Ownable, pausable contract with reentrancy protection and creation metadata.",
    state="""    string public agreementName;
    uint256 public creationTimestamp;
    address public creator;

    event ContractInitialized(address indexed creator, uint256 timestamp);
    event ActionPerformed(address indexed performer, string actionType, uint256 timestamp);
""",
    constructor="""        agreementName = "{category}";
        creationTimestamp = block.timestamp;
        creator = msg.sender;
        emit ContractInitialized(creator, creationTimestamp);
""",
    functions="""    function performAction(string calldata actionType) external whenNotPaused {
        emit ActionPerformed(msg.sender, actionType, block.timestamp);
    }

    function getContractInfo() external view returns (string memory, address, uint256) {
        return (agreementName, creator, creationTimestamp);
    }

    function pause() external onlyOwner {
        _pause();
    }

    function unpause() external onlyOwner {
        _unpause();
    }
""",
    risks=(
        "Owner key compromise allows pausing and reconfiguration of the contract.",
    ),
)


ORGANIZATION_FRAGMENTS: dict[str, Fragment] = {
    "PRIVATE LIMITED COMPANY": Fragment(
        notes="Private limited company: capped shareholder count, board members and shareholder classes.",
        state="""    uint256 public maxShareholders;
    mapping(address => bool) public boardMembers;
    mapping(address => uint256) public shareholderClass;

    event BoardMemberAdded(address indexed member);
    event ShareholderClassUpdated(address indexed holder, uint256 class);
""",
        constructor="""        maxShareholders = 200;
        boardMembers[msg.sender] = true;
""",
        functions="""    function addBoardMember(address member) external onlyOwner {
        require(member != address(0), "Invalid member");
        boardMembers[member] = true;
        emit BoardMemberAdded(member);
    }

    function setShareholderClass(address holder, uint256 class) external onlyOwner {
        require(class >= 1 && class <= 3, "Invalid class");
        shareholderClass[holder] = class;
        emit ShareholderClassUpdated(holder, class);
    }
""",
        risks=("Board membership is controlled by a single owner account.",),
    ),
    "LIMITED LIABILITY PARTNERSHIP": Fragment(
        notes="LLP: members with bounded liability, capital contributions and designated partners.",
        state="""    struct LLPMember {
        uint256 liability;
        uint256 contribution;
        bool isDesignatedPartner;
        bool exists;
    }
    mapping(address => LLPMember) public members;
    uint256 public totalLiability;

    event MemberAdded(address indexed member, bool isDesignated);
    event LiabilityUpdated(address indexed member, uint256 newLiability);
""",
        functions="""    function addMember(address member, uint256 liability, bool designated) external onlyOwner {
        require(member != address(0), "Invalid member");
        require(!members[member].exists, "Member exists");
        members[member] = LLPMember(liability, 0, designated, true);
        totalLiability += liability;
        emit MemberAdded(member, designated);
    }

    function updateLiability(address member, uint256 newLiability) external onlyOwner {
        require(members[member].exists, "Unknown member");
        totalLiability = totalLiability - members[member].liability + newLiability;
        members[member].liability = newLiability;
        emit LiabilityUpdated(member, newLiability);
    }
""",
        risks=("Designated partner status is not enforced on privileged functions.",),
    ),
    "GENERAL PARTNERSHIP": Fragment(
        notes="General partnership: partners with profit share and capital contribution records.",
        state="""    struct PartnerRecord {
        uint256 profitShare;
        uint256 capitalContribution;
        bool isManaging;
    }
    mapping(address => PartnerRecord) public partnerRecords;
    uint256 public totalPartners;

    event CapitalContributed(address indexed partner, uint256 amount);
""",
        functions="""    function contributeCapital() external payable whenNotPaused {
        require(msg.value > 0, "No capital sent");
        partnerRecords[msg.sender].capitalContribution += msg.value;
        emit CapitalContributed(msg.sender, msg.value);
    }
""",
    ),
}


TRANSACTION_FRAGMENTS: dict[str, Fragment] = {
    "B2B": Fragment(
        notes="B2B: verified business counterparties, credit limits and bulk transfers.",
        state="""    struct BusinessVerification {
        bool isVerified;
        uint256 creditLimit;
        uint256 tradingVolume;
    }
    mapping(address => BusinessVerification) public verifiedBusinesses;
    uint256 public minBusinessTransaction;

    event BusinessVerified(address indexed business);
    event CreditLimitUpdated(address indexed business, uint256 limit);
""",
        constructor="""        minBusinessTransaction = 1000;
""",
        functions="""    function verifyBusiness(address business, uint256 creditLimit) external onlyOwner {
        require(business != address(0), "Invalid business");
        verifiedBusinesses[business].isVerified = true;
        verifiedBusinesses[business].creditLimit = creditLimit;
        emit BusinessVerified(business);
        emit CreditLimitUpdated(business, creditLimit);
    }
""",
        risks=("Credit limits are set off-chain and trusted without oracle verification.",),
    ),
    "B2C": Fragment(
        notes="B2C: consumer refund window, purchase caps and dispute flags.",
        state="""    uint256 public refundWindow;
    uint256 public maxConsumerPurchase;
    mapping(address => bool) public hasDispute;

    event ConsumerRefundRequested(address indexed consumer, uint256 amount);
    event DisputeResolved(address indexed consumer, bool inFavorOfConsumer);
""",
        constructor="""        refundWindow = 14 days;
        maxConsumerPurchase = 10 ether;
""",
        functions="""    function raiseDispute() external whenNotPaused {
        hasDispute[msg.sender] = true;
    }

    function resolveDispute(address consumer, bool inFavorOfConsumer) external onlyOwner {
        require(hasDispute[consumer], "No dispute");
        hasDispute[consumer] = false;
        emit DisputeResolved(consumer, inFavorOfConsumer);
    }
""",
    ),
    "C2C": Fragment(
        notes="Peer-to-peer: trust scores and per-peer transaction counters.",
        state="""    struct PeerProfile {
        uint256 trustScore;
        uint256 transactionCount;
        bool isVerified;
    }
    mapping(address => PeerProfile) public peerProfiles;

    event TrustScoreUpdated(address indexed peer, uint256 newScore);
""",
        functions="""    function updateTrustScore(address peer, uint256 newScore) external onlyOwner {
        peerProfiles[peer].trustScore = newScore;
        emit TrustScoreUpdated(peer, newScore);
    }
""",
    ),
}


# Category fragments are looked up by keyword contained in the category name.
CATEGORY_FRAGMENTS: dict[str, Fragment] = {
    "profit sharing": Fragment(
        notes="Profit sharing: partner shares summing to 100 and pro-rata distribution of received funds.",
        state="""    struct Partner {
        uint256 shares;
        uint256 totalReceived;
        bool exists;
    }
    mapping(address => Partner) public partners;
    address[] public partnerList;
    uint256 public totalShares;
    uint256 public totalDistributed;

    event PartnerAdded(address indexed partner, uint256 shares);
    event PartnerRemoved(address indexed partner);
    event ProfitDistributed(uint256 amount);
""",
        functions="""    function addPartner(address partner, uint256 shares) external onlyOwner {
        require(partner != address(0), "Invalid partner address");
        require(!partners[partner].exists, "Partner already exists");
        require(totalShares + shares <= 100, "Total shares cannot exceed 100");
        partners[partner] = Partner(shares, 0, true);
        partnerList.push(partner);
        totalShares += shares;
        emit PartnerAdded(partner, shares);
    }

    function removePartner(address partner) external onlyOwner {
        require(partners[partner].exists, "Partner does not exist");
        totalShares -= partners[partner].shares;
        delete partners[partner];
        uint256 count = partnerList.length;
        for (uint256 i = 0; i < count; i++) {
            if (partnerList[i] == partner) {
                partnerList[i] = partnerList[count - 1];
                partnerList.pop();
                break;
            }
        }
        emit PartnerRemoved(partner);
    }

    function distributeProfits() external payable nonReentrant whenNotPaused {
        require(msg.value > 0, "No profits to distribute");
        require(totalShares == 100, "Shares not fully allocated");
        uint256 count = partnerList.length;
        for (uint256 i = 0; i < count; i++) {
            address partner = partnerList[i];
            uint256 share = (msg.value * partners[partner].shares) / 100;
            partners[partner].totalReceived += share;
            (bool ok, ) = payable(partner).call{value: share}("");
            require(ok, "Transfer failed");
        }
        totalDistributed += msg.value;
        emit ProfitDistributed(msg.value);
    }

    function getPartnerList() external view returns (address[] memory) {
        return partnerList;
    }
""",
        risks=(
            "Push-based distribution can be blocked by a partner contract that rejects ether.",
            "Unbounded partner list makes distribution gas grow linearly.",
        ),
    ),
    "revenue": Fragment(
        notes="Revenue sharing: stakeholders withdraw accrued revenue per share.",
        state="""    uint256 public totalRevenue;
    uint256 public revenuePerShare;
    mapping(address => uint256) public stakeholderShares;
    mapping(address => uint256) public lastRevenueWithdrawn;

    event RevenueDistributed(uint256 amount);
    event RevenueWithdrawn(address indexed holder, uint256 amount);
""",
        functions="""    function depositRevenue() external payable whenNotPaused {
        require(msg.value > 0, "No revenue");
        totalRevenue += msg.value;
        emit RevenueDistributed(msg.value);
    }

    function setStakeholderShares(address holder, uint256 shares) external onlyOwner {
        stakeholderShares[holder] = shares;
    }
""",
        risks=("Share assignment is not bounded by a total supply.",),
    ),
    "equity": Fragment(
        notes="Equity tokenization: whitelisted holders, share locks and voting records.",
        state="""    mapping(address => bool) public isWhitelisted;
    mapping(address => uint256) public lockedUntil;

    event WhitelistUpdated(address indexed account, bool status);
""",
        functions="""    function setWhitelisted(address account, bool status) external onlyOwner {
        isWhitelisted[account] = status;
        emit WhitelistUpdated(account, status);
    }

    function lockShares(address holder, uint256 duration) external onlyOwner {
        lockedUntil[holder] = block.timestamp + duration;
    }
""",
    ),
    "vesting": Fragment(
        notes="Vesting: cliff and linear vesting schedules with optional revocation.",
        state="""    struct VestingSchedule {
        uint256 totalAmount;
        uint256 startTime;
        uint256 cliffDuration;
        uint256 vestingDuration;
        uint256 releasedAmount;
        bool revocable;
        bool revoked;
    }
    mapping(address => VestingSchedule) public vestingSchedules;

    event VestingScheduleCreated(address indexed beneficiary, uint256 amount);
    event VestingRevoked(address indexed beneficiary);
""",
        functions="""    function createVestingSchedule(
        address beneficiary,
        uint256 amount,
        uint256 cliffDuration,
        uint256 vestingDuration,
        bool revocable
    ) external onlyOwner {
        require(vestingDuration > 0, "Invalid duration");
        vestingSchedules[beneficiary] = VestingSchedule(
            amount, block.timestamp, cliffDuration, vestingDuration, 0, revocable, false
        );
        emit VestingScheduleCreated(beneficiary, amount);
    }

    function revoke(address beneficiary) external onlyOwner {
        require(vestingSchedules[beneficiary].revocable, "Not revocable");
        vestingSchedules[beneficiary].revoked = true;
        emit VestingRevoked(beneficiary);
    }
""",
    ),
    "supply chain": Fragment(
        notes="Supply chain: products tracked from creation through transit to delivery.",
        state="""    enum Status { Created, InTransit, Delivered }
    struct Product {
        uint256 id;
        string metadata;
        address manufacturer;
        uint256 timestamp;
        Status status;
    }
    mapping(uint256 => Product) public products;
    uint256 public productCount;

    event ProductCreated(uint256 indexed id, address manufacturer);
    event StatusUpdated(uint256 indexed id, Status status);
""",
        functions="""    function createProduct(string calldata metadata) external whenNotPaused returns (uint256) {
        productCount += 1;
        products[productCount] = Product(productCount, metadata, msg.sender, block.timestamp, Status.Created);
        emit ProductCreated(productCount, msg.sender);
        return productCount;
    }

    function updateStatus(uint256 id, Status status) external onlyOwner {
        require(products[id].id != 0, "Unknown product");
        products[id].status = status;
        emit StatusUpdated(id, status);
    }
""",
    ),
    "governance": Fragment(
        notes="Corporate governance: proposals with for/against tallies and execution.",
        state="""    struct Proposal {
        address proposer;
        string description;
        uint256 forVotes;
        uint256 againstVotes;
        uint256 endTime;
        bool executed;
    }
    mapping(uint256 => Proposal) public proposals;
    mapping(uint256 => mapping(address => bool)) public hasVoted;
    uint256 public proposalCount;

    event ProposalCreated(uint256 indexed id, address proposer);
    event VoteCast(address indexed voter, uint256 proposalId, bool support);
""",
        functions="""    function propose(string calldata description, uint256 duration) external returns (uint256) {
        proposalCount += 1;
        proposals[proposalCount] = Proposal(msg.sender, description, 0, 0, block.timestamp + duration, false);
        emit ProposalCreated(proposalCount, msg.sender);
        return proposalCount;
    }

    function vote(uint256 id, bool support) external {
        require(block.timestamp < proposals[id].endTime, "Voting closed");
        require(!hasVoted[id][msg.sender], "Already voted");
        hasVoted[id][msg.sender] = true;
        if (support) {
            proposals[id].forVotes += 1;
        } else {
            proposals[id].againstVotes += 1;
        }
        emit VoteCast(msg.sender, id, support);
    }
""",
        risks=("One-address-one-vote is open to sybil voting.",),
    ),
    "white label": Fragment(
        notes="White label: brand configuration and authorized minters.",
        state="""    string public brandName;
    uint256 public maxSupply;
    mapping(address => bool) public authorizedMinters;

    event MinterAuthorized(address indexed minter, bool status);
""",
        functions="""    function authorizeMinter(address minter, bool status) external onlyOwner {
        authorizedMinters[minter] = status;
        emit MinterAuthorized(minter, status);
    }
""",
    ),
}


def lookup_category(category: str) -> Fragment:
    """First category fragment whose keyword occurs in the category name."""
    lowered = category.casefold()
    for keyword, fragment in CATEGORY_FRAGMENTS.items():
        if keyword in lowered:
            return fragment
    return EMPTY
